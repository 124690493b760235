from typing import List, Optional

from pydantic import BaseModel

from printstream.models.base import CamelModel


class SubscribeRequest(BaseModel):
    paymentMethodId: Optional[str] = None
    priceId: Optional[str] = None


class SubscriptionSummary(CamelModel):
    id: Optional[str] = None
    status: Optional[str] = None
    current_period_end: Optional[str] = None
    cancel_at_period_end: bool = False
    client_secret: Optional[str] = None


class SubscriptionEnvelope(CamelModel):
    message: str
    subscription: SubscriptionSummary


class Plan(CamelModel):
    id: Optional[str] = None
    name: Optional[str] = None
    amount: float = 0
    currency: Optional[str] = None
    interval: Optional[str] = None


class CurrentSubscription(SubscriptionSummary):
    stripe_id: str
    plan: Optional[Plan] = None


class CurrentSubscriptionResponse(CamelModel):
    subscription: Optional[CurrentSubscription] = None
    message: Optional[str] = None


class SetupIntentResponse(CamelModel):
    client_secret: Optional[str] = None


class PlanOffer(CamelModel):
    id: str
    name: Optional[str] = None
    description: str = ""
    price_id: Optional[str] = None
    price: float
    currency: Optional[str] = None
    interval: str = "month"
    features: List[str]


class PlansResponse(CamelModel):
    plans: List[PlanOffer]
