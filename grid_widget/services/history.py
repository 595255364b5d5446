"""Undo and redo of record changes through django-simple-history.

Every save or delete of a model with ``history = HistoricalRecords()``
leaves a historical record holding the state the change produced. Undoing
that change puts back the state of the record before it, or deletes the
row when the change created it. The revert is itself a change, so undoing
the revert redoes the original change.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import models
from simple_history.exceptions import NotHistoricalModelError
from simple_history.utils import get_history_manager_for_model

logger = logging.getLogger(__name__)


def history_manager(model: type[models.Model]):
    """The model's history manager, or ``None`` when the model keeps no history."""
    try:
        return get_history_manager_for_model(model)
    except NotHistoricalModelError:
        return None


def latest_version(model: type[models.Model], pk: Any):
    """The historical record of the last change to the row with ``pk``."""
    manager = history_manager(model)
    if manager is None or pk is None:
        return None
    return manager.filter(**{model._meta.pk.attname: pk}).order_by("-history_date", "-history_id").first()


def revert_version(version) -> models.Model:
    """Undo the change recorded by ``version`` and return the affected record."""
    model = version.instance_type
    previous = version.prev_record
    if version.history_type == "+" or previous is None:
        record = version.instance
        model._default_manager.filter(pk=record.pk).delete()
        logger.info("reverted creation of %s %s", model._meta.label, record.pk)
        return record
    record = previous.instance
    record.save()
    logger.info("reverted %s %s to its state of %s", model._meta.label, record.pk, previous.history_date)
    return record


def find_version(model: type[models.Model], history_id: Any) -> Optional[Any]:
    manager = history_manager(model)
    if manager is None:
        return None
    return manager.filter(history_id=history_id).first()
