"""
Subscription Plans
Static plan catalogue per user type (prices in INR)
"""

from typing import Optional

PAYMENT_PLANS = {
    "coach": {
        "default_plan": "coordinator",
        "redirect_path": "/dashboard/coach",
        "display_name": "Coach/Coordinator",
        "plans": [
            {
                "id": "coordinator",
                "name": "Coordinator Plan",
                "price": 2,
                "original_price": 2,
                "duration": "month",
                "popular": True,
                "features": [
                    "Unlimited students",
                    "Unlimited events",
                    "Advanced analytics",
                    "Priority support",
                    "Mobile app access",
                    "Bulk student import",
                    "Custom branding",
                    "Payment processing",
                    "Event management",
                    "Student registration",
                    "Performance tracking",
                    "Certificate generation",
                ],
                "not_included": [],
            },
        ],
    },
    "club": {
        "default_plan": "standard",
        "redirect_path": "/dashboard/club",
        "display_name": "Club",
        "plans": [
            {
                "id": "standard",
                "name": "Standard Plan",
                "price": 2999,
                "original_price": 4499,
                "duration": "month",
                "popular": True,
                "features": [
                    "Up to 200 members",
                    "Event management",
                    "Member analytics",
                    "Priority support",
                    "Mobile app access",
                    "Bulk member import",
                    "Custom branding",
                    "Payment processing",
                    "Club dashboard",
                ],
                "not_included": ["White-label solution", "API access"],
            },
            {
                "id": "premium",
                "name": "Premium Plan",
                "price": 4999,
                "original_price": 7499,
                "duration": "month",
                "popular": False,
                "features": [
                    "Up to 500 members",
                    "Advanced event management",
                    "Advanced analytics",
                    "Priority support",
                    "Mobile app access",
                    "Bulk member import",
                    "Custom branding",
                    "Payment processing",
                    "Club dashboard",
                    "White-label solution",
                    "API access",
                ],
                "not_included": [],
            },
        ],
    },
    "institute": {
        "default_plan": "standard",
        "redirect_path": "/dashboard/institute",
        "display_name": "Institute",
        "plans": [
            {
                "id": "standard",
                "name": "Standard Plan",
                "price": 4999,
                "original_price": 7499,
                "duration": "month",
                "popular": True,
                "features": [
                    "Up to 500 students",
                    "Unlimited coaches",
                    "Advanced analytics",
                    "Priority support",
                    "Mobile app access",
                    "Bulk student import",
                    "Custom branding",
                    "Payment processing",
                    "Institute dashboard",
                ],
                "not_included": ["White-label solution", "API access"],
            },
            {
                "id": "enterprise",
                "name": "Enterprise Plan",
                "price": 7999,
                "original_price": 11999,
                "duration": "month",
                "popular": False,
                "features": [
                    "Unlimited students",
                    "Unlimited coaches",
                    "Advanced analytics",
                    "Priority support",
                    "Mobile app access",
                    "Bulk student import",
                    "Custom branding",
                    "Payment processing",
                    "Institute dashboard",
                    "White-label solution",
                    "API access",
                    "Dedicated account manager",
                ],
                "not_included": [],
            },
        ],
    },
    "student": {
        "default_plan": "basic",
        "redirect_path": "/dashboard/student",
        "display_name": "Student",
        "plans": [
            {
                "id": "basic",
                "name": "Basic Plan",
                "price": 299,
                "original_price": 499,
                "duration": "month",
                "popular": False,
                "features": [
                    "Event registration",
                    "Basic profile",
                    "Mobile app access",
                    "Email support",
                ],
                "not_included": [
                    "Priority support",
                    "Advanced analytics",
                    "Custom achievements",
                ],
            },
            {
                "id": "premium",
                "name": "Premium Plan",
                "price": 599,
                "original_price": 899,
                "duration": "month",
                "popular": True,
                "features": [
                    "Unlimited event registration",
                    "Advanced profile",
                    "Performance analytics",
                    "Priority support",
                    "Mobile app access",
                    "Custom achievements",
                    "Coach connections",
                ],
                "not_included": [],
            },
        ],
    },
}

USER_TYPES = tuple(PAYMENT_PLANS.keys())


def get_plans_for_user_type(user_type: str) -> dict:
    """Plans for a user type; unknown types get the student catalogue"""
    return PAYMENT_PLANS.get((user_type or "").lower(), PAYMENT_PLANS["student"])


def get_plan(user_type: str, plan_id: Optional[str] = None) -> Optional[dict]:
    """A single plan; the user type's default plan when plan_id is empty"""
    catalogue = get_plans_for_user_type(user_type)
    wanted = plan_id or catalogue["default_plan"]
    for plan in catalogue["plans"]:
        if plan["id"] == wanted:
            return plan
    return None
