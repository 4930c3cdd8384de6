"""Database models."""

from cineverse.models.ads import AdPayment, SponsoredPost, SponsoredPostStatus
from cineverse.models.exam import (
    Exam,
    ExamAnswer,
    ExamOption,
    ExamQuestion,
    ExamSubmission,
    QuestionType,
    SubmissionStatus,
)
from cineverse.models.post import Post, PostStatus, PostType
from cineverse.models.settings import AppSetting
from cineverse.models.subscription import (
    AccessKey,
    AccessKeyType,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
    PaymentType,
    SubscriptionInterval,
    SubscriptionPlan,
    SubscriptionStatus,
    UserSubscription,
)
from cineverse.models.user import AccountType, User, UserRole

__all__ = [
    "AccessKey",
    "AccessKeyType",
    "AccountType",
    "AdPayment",
    "AppSetting",
    "Exam",
    "ExamAnswer",
    "ExamOption",
    "ExamQuestion",
    "ExamSubmission",
    "PaymentMethod",
    "PaymentRecord",
    "PaymentStatus",
    "PaymentType",
    "Post",
    "PostStatus",
    "PostType",
    "QuestionType",
    "SponsoredPost",
    "SponsoredPostStatus",
    "SubmissionStatus",
    "SubscriptionInterval",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "User",
    "UserRole",
    "UserSubscription",
]
