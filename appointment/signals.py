from __future__ import annotations

import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Appointment
from .services.completion import handle_status_change

LOGGER = logging.getLogger(__name__)


@receiver(pre_save, sender=Appointment)
def remember_stored_status(sender, instance: Appointment, **kwargs):
	"""Keep the status as stored before this save so post_save can see the transition."""

	if instance.pk is None:
		instance._stored_status = None
		return
	instance._stored_status = (
		sender.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
	)


@receiver(post_save, sender=Appointment)
def run_completion_pipeline(sender, instance: Appointment, created, raw=False, **kwargs):
	"""Create the lab bag whenever an appointment moves into Completed."""

	if raw:
		# Fixture loading
		return
	previous = getattr(instance, "_stored_status", None)
	bag = handle_status_change(instance, previous)
	if bag is not None:
		LOGGER.debug("Completion pipeline ran for appointment %s (bag %s)", instance.pk, bag.pk)
