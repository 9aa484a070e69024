"""Factory Boy factories for equipment test data generation."""

import uuid

import factory
from factory.django import DjangoModelFactory

from django.utils import timezone


class UserFactory(DjangoModelFactory):
    """Factory for the auth user model."""

    class Meta:
        model = "auth.User"
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    is_active = True

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        pwd = extracted or "testpass123!"
        self.set_password(pwd)
        if create:
            self.save(update_fields=["password"])


class EquipmentItemFactory(DjangoModelFactory):
    """Factory for EquipmentItem.

    Writes the row directly, bypassing the lifecycle service, so no
    ``assign`` movement is logged.
    """

    class Meta:
        model = "equipment.EquipmentItem"

    owner_id = "E1"
    name = factory.Sequence(lambda n: f"Item {n}")
    code = factory.Sequence(lambda n: f"EQ-{n:04d}")
    serial = factory.Sequence(lambda n: f"SN-{n:06d}")
    type = "computer"
    status = "assigned"
    assigned_at = factory.LazyFunction(timezone.now)


class MovementFactory(DjangoModelFactory):
    """Factory for Movement.

    Movement.save() blocks updates on existing objects,
    so this factory only creates new instances.
    """

    class Meta:
        model = "equipment.Movement"

    asset_id = factory.LazyFunction(uuid.uuid4)
    owner_id = "E1"
    type = "assign"
    created_by = "tester"
