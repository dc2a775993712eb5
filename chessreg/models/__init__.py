from chessreg.models.base import Base, engine, AsyncSessionFactory
from chessreg.models.models import (
    Player,
    Gender,
    AgeCategory,
    PaymentStatus,
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionFactory",
    "Player",
    "Gender",
    "AgeCategory",
    "PaymentStatus",
]
