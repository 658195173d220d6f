from decimal import Decimal, InvalidOperation
from enum import StrEnum

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.models.base import Base, TimestampMixin, UUIDMixin, enum_column


class SettingType(StrEnum):
    STRING = "string"
    NUMBER = "number"


def parse_setting(value: str, type_: SettingType) -> str | Decimal:
    """Interpret a stored setting *value* according to its declared *type_*.

    Raises ``ValueError`` when a ``number`` setting does not hold a finite
    decimal.  ``NaN`` and ``Infinity`` parse as decimals but have no JSON form.
    """
    if type_ is SettingType.NUMBER:
        try:
            number = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"{value!r} is not a valid number") from None
        if not number.is_finite():
            raise ValueError(f"{value!r} is not a valid number")
        return number
    return value


class Setting(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[SettingType] = mapped_column(
        enum_column(SettingType, "setting_type"),
        nullable=False,
        default=SettingType.STRING,
    )

    def typed_value(self) -> str | Decimal:
        return parse_setting(self.value, self.type)

    def __repr__(self) -> str:
        return f"<Setting key={self.key!r} type={self.type!r}>"
