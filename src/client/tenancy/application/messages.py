"""User-facing messages for onboarding errors.

Onboarding reasons get their own wording; transport failures share
generic wording that never reveals collaborator internals.
"""

from __future__ import annotations

from tenancy.domain.models import OnboardingError
from tenancy.domain.value_objects import OnboardingReason

DEFAULT_LOCALE = "en"

_CATALOGS: dict[str, dict[OnboardingReason, str]] = {
    "en": {
        OnboardingReason.NO_PROFILE: (
            "Your account has no profile yet. Use the invitation link from your "
            "company administrator to finish setting it up."
        ),
        OnboardingReason.NO_TENANT_LINK: (
            "Your account is not linked to a company yet. Complete your company "
            "setup or ask your administrator for an invitation."
        ),
        OnboardingReason.TENANT_NOT_FOUND: (
            "The company linked to your account could not be found."
        ),
        OnboardingReason.TENANT_INCOMPLETE: (
            "Your company details are incomplete. Complete the company setup to continue."
        ),
        OnboardingReason.TENANT_PENDING: (
            "Your company is awaiting approval. You will get access once it is approved."
        ),
        OnboardingReason.TENANT_REJECTED: (
            "Your company registration was rejected. Contact support for details."
        ),
        OnboardingReason.NETWORK_UNREACHABLE: (
            "Could not reach the server. Check your connection and sign in again."
        ),
        OnboardingReason.PERMISSION_DENIED: (
            "You do not have sufficient permissions to access your company data."
        ),
        OnboardingReason.UNKNOWN: (
            "Something went wrong while loading your account. Please try signing in again."
        ),
    },
    "ar": {
        OnboardingReason.NO_PROFILE: (
            "لا يوجد ملف شخصي لحسابك بعد. استخدم رابط الدعوة من مسؤول شركتك لإكمال الإعداد."
        ),
        OnboardingReason.NO_TENANT_LINK: (
            "حسابك غير مرتبط بأي شركة بعد. أكمل بيانات الشركة أو اطلب دعوة من المسؤول."
        ),
        OnboardingReason.TENANT_NOT_FOUND: "تعذر العثور على الشركة المرتبطة بحسابك.",
        OnboardingReason.TENANT_INCOMPLETE: "بيانات الشركة غير مكتملة. أكمل إعداد الشركة للمتابعة.",
        OnboardingReason.TENANT_PENDING: "شركتك بانتظار الموافقة. ستتمكن من الدخول بعد اعتمادها.",
        OnboardingReason.TENANT_REJECTED: "تم رفض تسجيل شركتك. تواصل مع الدعم لمزيد من التفاصيل.",
        OnboardingReason.NETWORK_UNREACHABLE: "تعذر الاتصال بالخادم. تحقق من الاتصال ثم سجّل الدخول مجددًا.",
        OnboardingReason.PERMISSION_DENIED: "الصلاحيات غير كافية للوصول إلى بيانات الشركة.",
        OnboardingReason.UNKNOWN: "حدث خطأ غير متوقع أثناء تحميل حسابك. حاول تسجيل الدخول مجددًا.",
    },
}


def message_for(reason: OnboardingReason, locale: str = DEFAULT_LOCALE) -> str:
    """Get the message for a reason, falling back to the default locale."""
    catalog = _CATALOGS.get(locale, _CATALOGS[DEFAULT_LOCALE])
    return catalog[reason]


def onboarding_error(reason: OnboardingReason, locale: str = DEFAULT_LOCALE) -> OnboardingError:
    """Build an OnboardingError carrying the localized message for ``reason``."""
    return OnboardingError(reason=reason, message=message_for(reason, locale))
