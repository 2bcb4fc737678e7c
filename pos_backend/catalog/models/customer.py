# catalog/models/customer.py

import uuid

from django.db import models

from catalog.records import CustomerRecord


class Customer(models.Model):
    """
    Customer directory entry (searched by the register, never edited by it).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def to_record(self) -> CustomerRecord:
        return CustomerRecord(
            id=str(self.id),
            name=self.name,
            email=self.email or "",
            phone=self.phone or "",
        )
