from .payment_settings import StorePaymentSettingsView

__all__ = ["StorePaymentSettingsView"]
