from .admin import CouponCreate, CouponResponse, CouponUpdate, GameCreate, GameUpdate
from .auth import Token, UserCreate, UserLogin, UserResponse
from .checkout import (
    CheckoutResponse,
    CreateCheckoutRequest,
    DownloadRequest,
    DownloadResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from .donation import DonationCreate, DonationResponse, LeaderboardEntry
from .store import CouponPreview, GameResponse, PurchaseResponse

__all__ = [
    "CheckoutResponse",
    "CouponCreate",
    "CouponPreview",
    "CouponResponse",
    "CouponUpdate",
    "CreateCheckoutRequest",
    "DonationCreate",
    "DonationResponse",
    "DownloadRequest",
    "DownloadResponse",
    "GameCreate",
    "GameResponse",
    "GameUpdate",
    "LeaderboardEntry",
    "PurchaseResponse",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
]
