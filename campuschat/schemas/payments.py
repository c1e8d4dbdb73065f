from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

class PaymentVerifyRequest(BaseModel):
    coins: int = Field(gt=0)

class TransactionSummary(BaseModel):
    reference: str
    amount: Decimal
    coins: int
    status: str
    paid_at: Optional[datetime] = None

class PaymentVerifyResponse(BaseModel):
    success: bool
    message: str
    coins: int
    newBalance: int
    transaction: TransactionSummary

class CoinPackage(BaseModel):
    coins: int
    price: Decimal
    currency: str
