from __future__ import annotations

from enum import Enum


class InteractionStatus(str, Enum):
    SENT = "Sent"
    WAITING = "Waiting"
    FOLLOW_UP = "FollowUp"
    DISCUSSION = "Discussion"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"
    CLOSED = "Closed"


class CompanyType(str, Enum):
    BANK = "Bank"
    HEDGE_FUND = "HedgeFund"
    ASSET_MANAGER = "AssetManager"
    PRIVATE_EQUITY = "PrivateEquity"
    PROP_SHOP = "PropShop"
    RECRUITER = "Recruiter"
    OTHER = "Other"


class InteractionType(str, Enum):
    OFFICIAL_APPLICATION = "OfficialApplication"
    LINKEDIN_MESSAGE = "LinkedInMessage"
    COLD_EMAIL = "ColdEmail"
    CALL = "Call"
    REFERRAL = "Referral"
    PHYSICAL_MEETING = "PhysicalMeeting"


class SourceType(str, Enum):
    DIRECT = "Direct"
    VIA_RECRUITER = "ViaRecruiter"


class ProcessStatus(str, Enum):
    ACTIVE = "Active"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    REJECTED = "Rejected"
    CLOSED = "Closed"


class InteractionStage(str, Enum):
    APPLICATION = "Application"
    SCREENING = "Screening"
    PHONE_INTERVIEW = "PhoneInterview"
    TECHNICAL = "Technical"
    FINAL_ROUND = "FinalRound"
    OFFER_STAGE = "OfferStage"
    OTHER = "Other"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Outcome(str, Enum):
    NONE = "None"
    REJECTED = "Rejected"
    INTERVIEW = "Interview"
    OFFER = "Offer"


class GlobalCategory(str, Enum):
    SALES = "Sales"
    TRADING = "Trading"
    STRUCTURING = "Structuring"
    INVESTMENT = "Investment"
    OTHER = "Other"


class FollowUpSeverity(str, Enum):
    NORMAL = "normal"
    ORANGE = "orange"
    RED = "red"
