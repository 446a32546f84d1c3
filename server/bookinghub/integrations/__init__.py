"""Clients for the payment processor and the CRM webhook."""

from .notifications import CrmNotifier
from .payments import CheckoutSession, PaymentGateway

__all__ = ["CheckoutSession", "CrmNotifier", "PaymentGateway"]
