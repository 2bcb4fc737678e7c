# sales/models/sale.py

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from sales.records import SaleLine, SaleRecord
from sales.services.sale_lifecycle import can_transition


class Sale(models.Model):
    """
    Represents a completed register transaction (backing store of the
    reference sale backend).

    GUARANTEES:
    - Immutable financial record once completed
    - The only status changes are completed -> voided and completed -> returned
    - transaction_number is unique and assigned by the backend, never the register
    """

    STATUS_COMPLETED = "completed"
    STATUS_VOIDED = "voided"
    STATUS_RETURNED = "returned"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_VOIDED, "Voided"),
        (STATUS_RETURNED, "Returned"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transaction_number = models.CharField(
        max_length=64,
        unique=True,
        help_text="Backend-assigned receipt number (TXN-YYYYMMDD-NNNN)",
    )

    customer_id = models.CharField(max_length=64, blank=True, default="")

    subtotal_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    payment_method = models.CharField(
        max_length=16,
        default="cash",
        help_text="cash/card/other",
    )

    amount_tendered = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    change_due = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
        db_index=True,
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    voided_at = models.DateTimeField(null=True, blank=True)
    void_reason = models.TextField(blank=True, default="")

    returned_at = models.DateTimeField(null=True, blank=True)
    return_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]

    _IMMUTABLE_FIELDS = (
        "transaction_number",
        "customer_id",
        "subtotal_amount",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "payment_method",
        "amount_tendered",
        "change_due",
        "created_at",
        "completed_at",
    )

    def _validate_immutable(self, previous: "Sale"):
        if self.status != previous.status:
            if not can_transition(from_status=previous.status, to_status=self.status):
                raise ValueError(
                    f"Sale is immutable once {previous.status}. "
                    f"Status change {previous.status} -> {self.status} is not allowed."
                )

        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Sale is immutable once {previous.status}. "
                    f"Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if self.status == self.STATUS_COMPLETED and not self.completed_at:
            self.completed_at = timezone.now()

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.transaction_number} | {self.total_amount}"

    def to_record(self) -> SaleRecord:
        items = tuple(
            SaleLine(
                product_id=str(item.product_id) if item.product_id else None,
                name=item.product_name,
                sku=item.sku,
                quantity=int(item.quantity),
                unit_price=Decimal(item.unit_price),
                line_total=Decimal(item.total_price),
            )
            for item in self.items.all()
        )
        return SaleRecord(
            id=str(self.id),
            transaction_number=self.transaction_number,
            items=items,
            subtotal=Decimal(self.subtotal_amount),
            discount=Decimal(self.discount_amount),
            tax=Decimal(self.tax_amount),
            total=Decimal(self.total_amount),
            payment_method=self.payment_method,
            status=self.status,
            created_at=self.created_at,
            customer_id=self.customer_id or None,
            amount_tendered=self.amount_tendered,
            change_due=self.change_due,
            completed_at=self.completed_at,
            voided_at=self.voided_at,
            void_reason=self.void_reason,
            returned_at=self.returned_at,
            return_reason=self.return_reason,
        )
