'''
Derives the six-valued payment health label shown on the roster dashboard.
'''
from typing import Any

from ..database.db_enums import StudentStatus, BillingType, SubscriptionStatus, PaymentHealth

HEALTHY_SUBSCRIPTION_STATUSES = {SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value}

# Dashboard sort order: most urgent first.
PAYMENT_HEALTH_ORDER = [
    PaymentHealth.NEEDS_ACTION,
    PaymentHealth.AT_RISK,
    PaymentHealth.HEALTHY,
    PaymentHealth.EXEMPT,
    PaymentHealth.PENDING,
    PaymentHealth.INACTIVE,
]


def calculate_payment_health(student: Any) -> PaymentHealth:
    """
    `student` needs `status`, `billing_type` and `subscription` (an object
    with a `status`, or None). The first matching rule wins.
    """
    if student.status == StudentStatus.REGISTERED:
        return PaymentHealth.PENDING

    if student.status != StudentStatus.ENROLLED:
        return PaymentHealth.INACTIVE

    if student.billing_type == BillingType.EXEMPT:
        return PaymentHealth.EXEMPT

    if student.subscription is None:
        return PaymentHealth.NEEDS_ACTION

    subscription_status = getattr(student.subscription.status, 'value', student.subscription.status)
    subscription_status = (subscription_status or '').lower()
    if subscription_status in HEALTHY_SUBSCRIPTION_STATUSES:
        return PaymentHealth.HEALTHY

    if subscription_status == SubscriptionStatus.PAST_DUE.value:
        return PaymentHealth.AT_RISK

    return PaymentHealth.NEEDS_ACTION


def payment_health_sort_key(health: PaymentHealth) -> int:
    return PAYMENT_HEALTH_ORDER.index(health)
