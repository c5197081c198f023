import enum


class PaymentMode(enum.Enum):
    CASH = "CASH"
    AC = "AC"
    UPI = "UPI"
    CHEQUE = "CHEQUE"
