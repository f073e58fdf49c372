from types import SimpleNamespace

import pytest

from swap_pricer.services import ai_service as ai_module
from swap_pricer.services.ai_service import (
    AIService,
    ANALYSIS_EMPTY,
    ANALYSIS_FAILED,
    ANALYSIS_MISSING_KEY,
    CODE_FAILED,
    CODE_MISSING_KEY,
    format_number,
    strip_code_fences,
)
from swap_pricer.services.swap_service import price_deal


class FakeOpenAI:
    def __init__(self, content="Balanced carry trade.", error=None):
        self.content = content
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeAnthropic:
    def __init__(self, text):
        self.calls = []
        self.messages = SimpleNamespace(create=self._create)
        self.text = text

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(text=self.text)])


@pytest.fixture
def service(no_ai_keys):
    return AIService()


def test_format_number():
    assert format_number(10_000_000) == "10,000,000"
    assert format_number(1234.5) == "1,234.5"
    assert format_number(-20_000.0) == "-20,000"
    assert format_number(float("nan")) == "NaN"


def test_strip_code_fences():
    assert strip_code_fences("```python\nprint(1)\n```") == "print(1)\n"
    assert strip_code_fences("```cpp\nint main() {}\n```") == "int main() {}\n"
    assert strip_code_fences("plain") == "plain"


def test_missing_key_returns_fallback(service, floating_deal):
    result = price_deal(floating_deal)
    assert service.analyze_swap_deal(floating_deal, result) == ANALYSIS_MISSING_KEY
    assert service.generate_pricing_code(floating_deal, "python") == CODE_MISSING_KEY


def test_invalid_provider_raises(service, floating_deal):
    result = price_deal(floating_deal)
    with pytest.raises(ValueError):
        service.analyze_swap_deal(floating_deal, result, "Mistral")


def test_invalid_language_raises(service, floating_deal):
    with pytest.raises(ValueError):
        service.generate_pricing_code(floating_deal, "rust")


@pytest.mark.filterwarnings("error:datetime.datetime.utcnow:DeprecationWarning")
def test_analysis_prompt_contents(service, floating_deal):
    service.openai_client = FakeOpenAI()
    result = price_deal(floating_deal)

    analysis = service.analyze_swap_deal(floating_deal, result, "OpenAI")

    assert analysis == "Balanced carry trade."
    prompt = service.openai_client.calls[0]["messages"][1]["content"]
    assert "Maturity: 2024-10-01 to 2029-10-01" in prompt
    assert "Leg 1 (Payer): BRL 10,000,000 @ 1.25% (Floating)" in prompt
    assert "Leg 2 (Receiver): USD 1,850,000 @ 3.75% (Fixed)" in prompt
    assert f"Total NPV: {result.npv_total_formatted}" in prompt
    assert "Spread: 250.0 bps" in prompt


def test_empty_analysis(service, fixed_deal):
    service.openai_client = FakeOpenAI(content=None)
    assert service.analyze_swap_deal(fixed_deal, price_deal(fixed_deal)) == ANALYSIS_EMPTY


def test_provider_error_degrades(service, fixed_deal):
    service.openai_client = FakeOpenAI(error=RuntimeError("rate limited"))
    assert service.analyze_swap_deal(fixed_deal, price_deal(fixed_deal)) == ANALYSIS_FAILED
    assert service.generate_pricing_code(fixed_deal, "cpp") == CODE_FAILED


def test_code_generation_with_anthropic(service, floating_deal):
    service.anthropic_client = FakeAnthropic("```python\nimport QuantLib as ql\n```")

    code = service.generate_pricing_code(floating_deal, "python", "Anthropic")

    assert code == "import QuantLib as ql\n"
    prompt = service.anthropic_client.calls[0]["messages"][0]["content"]
    assert "QuantLib-Python" in prompt
    assert "Valuation Date: 2024-09-27" in prompt
    assert "**Leg 2 (Receiver):**" in prompt
    assert "- Frequency: Semi-Annual" in prompt
    assert "- Day Count: 30/360" in prompt


def test_google_provider(service, fixed_deal, monkeypatch):
    captured = {}

    class FakeModel:
        def __init__(self, model_name, generation_config, system_instruction):
            captured["model_name"] = model_name

        def generate_content(self, prompt):
            captured["prompt"] = prompt
            return SimpleNamespace(text="Gemini says hello.")

    monkeypatch.setattr(ai_module.gemini, "GenerativeModel", FakeModel)
    service.google_api_key = "test-key"

    analysis = service.analyze_swap_deal(fixed_deal, price_deal(fixed_deal), "Google")

    assert analysis == "Gemini says hello."
    assert captured["model_name"] == ai_module.settings.GOOGLE_MODEL
    assert "Cross-Currency Swap" in captured["prompt"]
