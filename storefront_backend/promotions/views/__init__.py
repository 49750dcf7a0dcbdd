from .discount_validate import DiscountValidateView

__all__ = ["DiscountValidateView"]
