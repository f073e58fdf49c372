import os
import re
from datetime import datetime, timezone
from typing import Optional

from openai import OpenAI
import anthropic
import google.generativeai as gemini

from swap_pricer.config import settings
from swap_pricer.utils.logger import get_logger, EventType, LogLevel
from swap_pricer.swap_calculator.models import PricingResult, SwapDeal

# Get parameters from environment variables
my_entity = os.environ.get('MY_ENTITY')

logger = get_logger(__name__, entity=my_entity)

PROVIDERS = ("OpenAI", "Anthropic", "Google")

CODE_LIBRARIES = {
    "python": "QuantLib-Python",
    "cpp": "QuantLib C++",
}

ANALYST_SYSTEM_PROMPT = "You are a senior financial derivative analyst specialising in cross-currency swaps."
QUANT_SYSTEM_PROMPT = "You are a quantitative developer. Answer with raw source code only, no Markdown."

ANALYSIS_MISSING_KEY = "API Key missing. Unable to perform AI analysis."
ANALYSIS_EMPTY = "No analysis generated."
ANALYSIS_FAILED = "Failed to generate analysis. Please check your connection or API limits."
CODE_MISSING_KEY = "// API Key missing. Unable to generate code."
CODE_EMPTY = "// No code generated."
CODE_FAILED = "// Failed to generate code. Please check your connection."

_FENCE_OPEN = re.compile(r"```[a-z+]*\n")


class MissingAPIKeyError(ValueError):
    """The selected provider has no API key configured."""


def format_number(value: float) -> str:
    """Thousands-separated number with at most three decimals."""
    if value != value:
        return "NaN"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences a model adds despite being asked not to."""
    return _FENCE_OPEN.sub("", text).replace("```", "")


class AIService:
    def __init__(self):
        self.openai_api_key = settings.OPENAI_API_KEY
        self.anthropic_api_key = settings.ANTHROPIC_API_KEY
        self.google_api_key = settings.GOOGLE_API_KEY
        self.default_provider = settings.DEFAULT_AI_PROVIDER

        # Initialize clients
        if self.openai_api_key:
            self.openai_client = OpenAI(api_key=self.openai_api_key)
        else:
            self.openai_client = None

        if self.anthropic_api_key:
            self.anthropic_client = anthropic.Client(api_key=self.anthropic_api_key)
        else:
            self.anthropic_client = None

        if self.google_api_key:
            gemini.configure(api_key=self.google_api_key)

    def resolve_provider(self, ai_provider: Optional[str]) -> str:
        provider = ai_provider or self.default_provider
        if provider not in PROVIDERS:
            logger.error(
                f"Invalid AI provider specified: {provider}",
                event_type=EventType.SYSTEM_EVENT,
                tags=["ai", "config", "error"]
            )
            raise ValueError("Invalid AIProvider specified. Use 'OpenAI', 'Anthropic' or 'Google'.")
        return provider

    def has_credentials(self, provider: str) -> bool:
        if provider == "OpenAI":
            return self.openai_client is not None
        if provider == "Anthropic":
            return self.anthropic_client is not None
        return bool(self.google_api_key)

    def get_analysis_prompt(self, deal: SwapDeal, result: PricingResult) -> str:
        """Build the analyst prompt for a priced deal."""
        leg1, leg2 = deal.leg1, deal.leg2
        return f"""
        Act as a senior financial derivative analyst. Analyze the following Cross-Currency Swap deal and its pricing results.

        **Deal Parameters:**
        - Maturity: {deal.start_date} to {deal.end_date}
        - Leg 1 (Payer): {leg1.currency} {format_number(leg1.notional)} @ {leg1.rate}% ({leg1.type})
        - Leg 2 (Receiver): {leg2.currency} {format_number(leg2.notional)} @ {leg2.rate}% ({leg2.type})

        **Pricing Results:**
        - Total NPV: {result.npv_total_formatted}
        - Spread: {result.spread} bps
        - Leg 1 NPV: {leg1.currency} {format_number(result.leg1_npv)}
        - Leg 2 NPV: {leg2.currency} {format_number(result.leg2_npv)}

        **Instructions:**
        1. Briefly explain the economic rationale of this trade.
        2. Highlight any arbitrage opportunities or risks based on the NPV.
        3. Comment on the interest rate differential.
        4. Keep it concise (under 150 words) and professional.
        """

    def get_code_prompt(self, deal: SwapDeal, language: str) -> str:
        """Build the code-generation prompt for a deal."""
        lib = CODE_LIBRARIES[language]
        legs = []
        for number, role, leg in ((1, "Payer", deal.leg1), (2, "Receiver", deal.leg2)):
            legs.append(f"""
        **Leg {number} ({role}):**
        - Currency: {leg.currency}
        - Notional: {leg.notional}
        - Rate: {leg.rate}%
        - Type: {leg.type}
        - Frequency: {leg.frequency}
        - Day Count: {leg.convention}
""")
        leg_details = "".join(legs)
        return f"""
        Act as a Quantitative Developer. Write a complete, executable {language} script using {lib} to price the following Cross-Currency Swap.

        **Instrument Details:**
        - Start Date: {deal.start_date}
        - End Date: {deal.end_date}
        - Valuation Date: {deal.value_date}
        {leg_details}
        **Requirements:**
        1. Include necessary imports.
        2. Mock/Bootstrap simple flat yield curves for both currencies (assume reasonable rates, e.g., 3% and 1.5%).
        3. Setup the Schedule and VanillaSwap (or CrossCurrencySwap if available in the specific library version, otherwise model as two legs).
        4. Setup a PricingEngine.
        5. Print the NPV.
        6. Add comments explaining the steps.
        7. Do not use markdown formatting (```), just return raw code.
        """

    def complete(self, prompt: str, ai_provider: str, system: str) -> str:
        """Send one prompt to the chosen provider and return the answer text."""
        request_id = f"req-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}"
        start_time = datetime.now(timezone.utc)

        if ai_provider == "OpenAI":
            if not self.openai_client:
                raise MissingAPIKeyError("OpenAI API key is not set.")
            model = settings.OPENAI_MODEL
            response = self.openai_client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt}
                ],
                max_tokens=2000,
                temperature=0.2
            )
            result = response.choices[0].message.content

        elif ai_provider == "Anthropic":
            if not self.anthropic_client:
                raise MissingAPIKeyError("Anthropic API key is not set.")
            model = settings.ANTHROPIC_MODEL
            response = self.anthropic_client.messages.create(
                model=model,
                system=system,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=2000,
                temperature=0.2
            )
            result = response.content[0].text if response.content else None

        elif ai_provider == "Google":
            if not self.google_api_key:
                raise MissingAPIKeyError("Google API key is not set")
            model = settings.GOOGLE_MODEL
            generative_model = gemini.GenerativeModel(
                model_name=model,
                generation_config={
                    "temperature": 0.2,
                    "max_output_tokens": 2000,
                    "response_mime_type": "text/plain",
                },
                system_instruction=system
            )
            response = generative_model.generate_content(prompt)
            result = response.text

        else:
            raise ValueError("Invalid AIProvider specified. Use 'OpenAI', 'Anthropic' or 'Google'.")

        execution_time_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
        logger.info(
            f"Received response from {ai_provider}",
            event_type=EventType.INTEGRATION,
            data={
                "request_id": request_id,
                "model": model,
                "duration_ms": execution_time_ms,
                "response_length": len(result or "")
            },
            tags=["ai", "complete", ai_provider.lower()]
        )
        return result or ""

    def analyze_swap_deal(self, deal: SwapDeal, result: PricingResult, ai_provider: Optional[str] = None) -> str:
        """Ask the model for a short risk and rationale write-up of a priced deal."""
        provider = self.resolve_provider(ai_provider)
        if not self.has_credentials(provider):
            logger.warning(
                f"{provider} API key is not set",
                event_type=EventType.SYSTEM_EVENT,
                tags=["ai", "analysis", "config"]
            )
            return ANALYSIS_MISSING_KEY

        try:
            logger.info(
                f"Requesting deal analysis from {provider}",
                event_type=EventType.INTEGRATION,
                data={"deal_id": deal.id},
                tags=["ai", "analysis", provider.lower()]
            )
            text = self.complete(self.get_analysis_prompt(deal, result), provider, ANALYST_SYSTEM_PROMPT)
            return text or ANALYSIS_EMPTY
        except Exception as e:
            logger.log_exception(
                e,
                message="AI analysis failed",
                level=LogLevel.ERROR,
                tags=["ai", "analysis", "error"]
            )
            return ANALYSIS_FAILED

    def generate_pricing_code(self, deal: SwapDeal, language: str, ai_provider: Optional[str] = None) -> str:
        """Ask the model for a QuantLib script pricing the deal."""
        if language not in CODE_LIBRARIES:
            raise ValueError(f"Unsupported language '{language}'. Use 'python' or 'cpp'.")
        provider = self.resolve_provider(ai_provider)
        if not self.has_credentials(provider):
            logger.warning(
                f"{provider} API key is not set",
                event_type=EventType.SYSTEM_EVENT,
                tags=["ai", "codegen", "config"]
            )
            return CODE_MISSING_KEY

        try:
            logger.info(
                f"Requesting {language} pricing code from {provider}",
                event_type=EventType.INTEGRATION,
                data={"deal_id": deal.id, "language": language},
                tags=["ai", "codegen", provider.lower()]
            )
            text = self.complete(self.get_code_prompt(deal, language), provider, QUANT_SYSTEM_PROMPT)
            if not text:
                return CODE_EMPTY
            return strip_code_fences(text)
        except Exception as e:
            logger.log_exception(
                e,
                message="Code generation failed",
                level=LogLevel.ERROR,
                tags=["ai", "codegen", "error"]
            )
            return CODE_FAILED
