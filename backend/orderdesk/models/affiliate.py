"""
Affiliate model - referral partner earning commission on tagged orders.
"""
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel

from orderdesk.models._fields import as_decimal, as_text


class Affiliate(BaseModel):
    record_id: Optional[str] = None
    code: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    share: Optional[Decimal] = None
    discount: Decimal = Decimal("0")
    payout_method: str = ""

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Affiliate":
        fields = record.get("fields", {})
        share = fields.get("share")
        return cls(
            record_id=record.get("id"),
            code=as_text(fields.get("Code")),
            first_name=as_text(fields.get("First Name")),
            last_name=as_text(fields.get("Last Name")),
            email=as_text(fields.get("Email")),
            phone=as_text(fields.get("Phone")),
            share=as_decimal(share) if share not in (None, "") else None,
            discount=as_decimal(fields.get("discount")),
            payout_method=as_text(fields.get("type")),
        )

    def to_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {"Code": self.code}
        if self.first_name:
            fields["First Name"] = self.first_name
        if self.last_name:
            fields["Last Name"] = self.last_name
        if self.email:
            fields["Email"] = self.email
        if self.phone:
            fields["Phone"] = self.phone
        if self.share is not None:
            fields["share"] = float(self.share)
        fields["discount"] = float(self.discount)
        if self.payout_method:
            fields["type"] = self.payout_method
        return fields
