from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from typing import List, Dict, Any, Optional, Union
import os
import random

from swap_pricer.config import settings
from swap_pricer.utils.logger import get_logger, EventType, LogLevel
from swap_pricer.services.ai_service import AIService
from swap_pricer.services.swap_service import (
    DealBook,
    price_deal,
    sample_deals,
    deal_payload,
    transform_output,
)
from swap_pricer.swap_calculator.adapters import prepare_swap_deal
from swap_pricer.swap_calculator.models import SwapDeal

router = APIRouter()

# Get parameters from environment variables
my_entity = os.environ.get('MY_ENTITY')

logger = get_logger(__name__, entity=my_entity)

# Initialize services
ai_service = AIService()
deal_book = DealBook(sample_deals() if settings.SEED_SAMPLE_DEALS else [])

def get_ai_service() -> AIService:
    return ai_service

def get_deal_book() -> DealBook:
    return deal_book

# Define request models
class SwapLegRequest(BaseModel):
    currency: str = "USD"
    notional: Union[float, str]
    rate: Union[float, str]
    type: str = "Fixed"
    frequency: str = "Quarterly"
    convention: str = "Actual/365"

class SwapDealRequest(BaseModel):
    valueDate: Optional[str] = None
    startDate: str
    endDate: str
    leg1: SwapLegRequest
    leg2: SwapLegRequest

class PriceRequest(SwapDealRequest):
    seed: Optional[int] = None
    save: bool = True

class AnalyzeRequest(SwapDealRequest):
    provider: Optional[str] = None
    seed: Optional[int] = None

class GenerateCodeRequest(SwapDealRequest):
    language: str = "python"
    provider: Optional[str] = None

class RepriceRequest(BaseModel):
    seed: Optional[int] = None

def _rng(seed: Optional[int]) -> Optional[random.Random]:
    return random.Random(seed) if seed is not None else None

def _to_deal(request: SwapDealRequest) -> SwapDeal:
    return prepare_swap_deal(request.model_dump(include={"valueDate", "startDate", "endDate", "leg1", "leg2"}))

def _fail(e: Exception, endpoint: str):
    if isinstance(e, HTTPException):
        raise e
    logger.log_exception(
        e,
        message=f"Unexpected error in {endpoint} endpoint",
        level=LogLevel.CRITICAL,
        tags=["api", "error", "fatal"]
    )
    raise HTTPException(status_code=500, detail=str(e))

@router.post("/price")
async def price_swap(request: PriceRequest, book: DealBook = Depends(get_deal_book)):
    try:
        logger.info(
            "Received swap pricing request",
            event_type=EventType.INTEGRATION,
            data={
                "pair": f"{request.leg1.currency}/{request.leg2.currency}",
                "seeded": request.seed is not None,
                "save": request.save
            },
            tags=["api", "price", "request"]
        )

        deal = _to_deal(request)
        result = price_deal(deal, rng=_rng(request.seed))
        if request.save:
            deal = book.add(deal)

        return transform_output(deal, result)

    except Exception as e:
        _fail(e, "price_swap")

@router.get("/deals")
async def list_deals(q: Optional[str] = None, book: DealBook = Depends(get_deal_book)) -> List[Dict[str, Any]]:
    return [deal_payload(deal) for deal in book.search(q)]

@router.get("/deals/{deal_id}")
async def get_deal(deal_id: str, book: DealBook = Depends(get_deal_book)):
    deal = book.get(deal_id)
    if deal is None:
        logger.warning(
            f"Deal not found: {deal_id}",
            event_type=EventType.INTEGRATION,
            tags=["api", "deals", "not-found"]
        )
        raise HTTPException(status_code=404, detail=f"Deal {deal_id} not found")
    return deal_payload(deal)

@router.post("/deals/{deal_id}/price")
async def reprice_deal(
    deal_id: str,
    request: Optional[RepriceRequest] = None,
    book: DealBook = Depends(get_deal_book)
):
    try:
        deal = book.get(deal_id)
        if deal is None:
            raise HTTPException(status_code=404, detail=f"Deal {deal_id} not found")

        seed = request.seed if request is not None else None
        result = price_deal(deal, rng=_rng(seed))
        return transform_output(deal, result)

    except Exception as e:
        _fail(e, "reprice_deal")

@router.post("/analyze")
async def analyze_swap(request: AnalyzeRequest, ai: AIService = Depends(get_ai_service)):
    try:
        logger.info(
            "Received swap analysis request",
            event_type=EventType.INTEGRATION,
            data={"provider": request.provider or settings.DEFAULT_AI_PROVIDER},
            tags=["api", "analyze", "request"]
        )

        deal = _to_deal(request)
        result = price_deal(deal, rng=_rng(request.seed))
        try:
            analysis = ai.analyze_swap_deal(deal, result, request.provider)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {"analysis": analysis}

    except Exception as e:
        _fail(e, "analyze_swap")

@router.post("/generate-code")
async def generate_code(request: GenerateCodeRequest, ai: AIService = Depends(get_ai_service)):
    try:
        logger.info(
            "Received pricing code request",
            event_type=EventType.INTEGRATION,
            data={"language": request.language, "provider": request.provider or settings.DEFAULT_AI_PROVIDER},
            tags=["api", "generate-code", "request"]
        )

        deal = _to_deal(request)
        try:
            code = ai.generate_pricing_code(deal, request.language, request.provider)
        except ValueError as e:
            logger.warning(
                str(e),
                event_type=EventType.INTEGRATION,
                tags=["api", "validation", "error"]
            )
            raise HTTPException(status_code=400, detail=str(e))

        return {"code": code}

    except Exception as e:
        _fail(e, "generate_code")
