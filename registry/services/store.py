"""
Keyed record store over the Django ORM.

Each :class:`RecordStore` wraps one model.  Writes validate the full
record (field validators plus ``Model.clean``) before touching the
database, inserts and updates alike.  Database-level unique constraints
are the final word on uniqueness: a violation at write time surfaces as
:class:`~registry.exceptions.ConflictError`.  No raw ORM error leaves
this module.
"""
from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, Optional, Type, TypeVar

from django.core.exceptions import FieldDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, models, transaction

from registry.exceptions import ConflictError, InternalError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=models.Model)


class RecordStore(Generic[M]):

    def __init__(self, model: Type[M]):
        self.model = model

    @property
    def label(self) -> str:
        return self.model.__name__

    # -- reads -------------------------------------------------------------
    def find_one(self, **filters) -> Optional[M]:
        try:
            return self.model._default_manager.filter(**filters).first()
        except (ValueError, TypeError, DjangoValidationError):
            # A filter value the column cannot hold matches nothing
            return None
        except DatabaseError as exc:
            raise self._internal('read', exc) from exc

    def find_by_id(self, pk) -> Optional[M]:
        return self.find_one(pk=pk)

    def find_many(self, **filters) -> list[M]:
        try:
            return list(self.model._default_manager.filter(**filters))
        except (ValueError, TypeError, DjangoValidationError):
            return []
        except DatabaseError as exc:
            raise self._internal('read', exc) from exc

    def exists(self, **filters) -> bool:
        try:
            return self.model._default_manager.filter(**filters).exists()
        except (ValueError, TypeError, DjangoValidationError):
            return False
        except DatabaseError as exc:
            raise self._internal('read', exc) from exc

    # -- writes ------------------------------------------------------------
    def insert(self, **fields) -> M:
        obj = self.model(**fields)
        return self._write(obj, 'insert')

    def update_by_id(self, pk, patch: Mapping[str, Any]) -> M:
        obj = self.find_by_id(pk)
        if obj is None:
            raise NotFoundError(f'{self.label} not found')
        for name, value in patch.items():
            self._check_field(name)
            setattr(obj, name, value)
        return self._write(obj, 'update')

    def _check_field(self, name: str) -> None:
        try:
            field = self.model._meta.get_field(name)
        except FieldDoesNotExist:
            raise ValidationError(f'Unknown field: {name}')
        if field.primary_key or not field.editable:
            raise ValidationError(f'Field cannot be changed: {name}')

    def _write(self, obj: M, op: str) -> M:
        try:
            obj.full_clean(validate_unique=False, validate_constraints=False)
        except DjangoValidationError as exc:
            raise ValidationError(
                f'{self.label} validation failed',
                fields=exc.message_dict if hasattr(exc, 'error_dict') else {'__all__': exc.messages},
            )
        try:
            with transaction.atomic():
                obj.save()
        except IntegrityError as exc:
            logger.info('%s %s rejected by unique constraint', self.label, op)
            raise ConflictError(f'{self.label} already exists') from exc
        except DatabaseError as exc:
            raise self._internal(op, exc) from exc
        return obj

    def _internal(self, op: str, exc: Exception) -> InternalError:
        logger.error('%s %s failed: %s', self.label, op, exc.__class__.__name__)
        return InternalError()
