"""In-memory campaign manager: moves prospects through outreach campaigns.

Sending an event only logs the personalised message and appends it to the
prospect's outbox; delivery over SMS, email or voice is not wired up.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from typing import Literal

from pydantic import BaseModel, Field

from dental_hub.config import OFFICE_NAME
from dental_hub.sdr.campaigns import (
    Campaign,
    CampaignType,
    EventType,
    ResponseAction,
    build_campaigns,
)

logger = logging.getLogger(__name__)

DEFAULT_REPLY = (
    "Thanks for your response! Would you like to hear more about our Enhanced "
    "Dental PPO Coverage options or schedule a quick call?"
)
DEFAULT_APPOINTMENT_TIME = "3:00 PM"
APPOINTMENT_SERVICE = "Enhanced Dental PPO Coverage Consultation"
APPOINTMENT_TAG = "appointment_scheduled"
INVALID_TAG = "invalid_contact"

AppointmentStatus = Literal["scheduled", "completed", "no-show", "cancelled"]


class Appointment(BaseModel):
    id: str
    prospect_id: str
    scheduled_on: date
    time: str
    status: AppointmentStatus = "scheduled"
    service: str = APPOINTMENT_SERVICE

    @property
    def display_date(self) -> str:
        return f"{self.scheduled_on:%A, %B} {self.scheduled_on.day}"


class Prospect(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    source: str | None = None
    appointment: Appointment | None = None


class CampaignVisit(BaseModel):
    campaign: CampaignType
    timestamp: datetime


class SentEvent(BaseModel):
    campaign: CampaignType
    name: str
    type: EventType
    message: str


class ProspectRecord(BaseModel):
    data: Prospect
    current_campaign: CampaignType
    stage: int = 0
    history: list[CampaignVisit] = Field(default_factory=list)
    tags: set[str] = Field(default_factory=set)
    outbox: list[SentEvent] = Field(default_factory=list)


class ResponseResult(BaseModel):
    action: ResponseAction
    reply: str
    target_campaign: CampaignType | None = None


class CampaignManager:
    """Tracks prospects, their campaign position and booked appointments."""

    def __init__(
        self,
        office_name: str | None = None,
        *,
        assignee_name: str | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.office_name = office_name or OFFICE_NAME
        self.assignee_name = (assignee_name or "").strip() or None
        self._clock = clock
        self.campaigns: dict[CampaignType, Campaign] = build_campaigns()
        self.prospects: dict[str, ProspectRecord] = {}
        self.appointments: dict[str, Appointment] = {}

    # ── Prospects ────────────────────────────────────────────────────

    def add_prospect(
        self, prospect: Prospect, campaign: CampaignType = CampaignType.LIST_VALIDATION,
    ) -> bool:
        """Register *prospect* in *campaign* and send its first event."""
        if campaign not in self.campaigns:
            return False
        self.prospects[prospect.id] = ProspectRecord(data=prospect, current_campaign=campaign)
        logger.info("Prospect %s added to %s", prospect.id, campaign)
        self.send_next_event(prospect.id)
        return True

    def send_next_event(self, prospect_id: str) -> bool:
        """Send the event at the prospect's current stage and advance.

        Past the last event the prospect moves on to the campaign's next
        campaign, if it has one.
        """
        record = self.prospects.get(prospect_id)
        if record is None:
            return False
        campaign = self.campaigns[record.current_campaign]
        if not campaign.automation_events:
            return False

        if record.stage >= len(campaign.automation_events):
            if campaign.next_campaign is not None:
                self.move_to_next_campaign(prospect_id, campaign.next_campaign)
                return True
            return False

        event = campaign.automation_events[record.stage]
        message = self.personalize_message(event.message, record.data)
        if event.type == "ai_voice_call":
            logger.info(
                "[%s] Initiating AI voice call to %s from %s: %s",
                campaign.name, record.data.first_name, self.office_name, message,
            )
        else:
            logger.info(
                "[%s] Sending %s to %s from %s: %s",
                campaign.name, event.type, record.data.first_name, self.office_name, message,
            )
        record.outbox.append(
            SentEvent(
                campaign=record.current_campaign, name=event.name,
                type=event.type, message=message,
            )
        )
        record.stage += 1
        return True

    def move_to_next_campaign(self, prospect_id: str, campaign: CampaignType) -> bool:
        record = self.prospects.get(prospect_id)
        if record is None or campaign not in self.campaigns:
            return False

        record.history.append(
            CampaignVisit(campaign=record.current_campaign, timestamp=datetime.now(UTC))
        )
        logger.info("Prospect %s: %s -> %s", prospect_id, record.current_campaign, campaign)
        record.current_campaign = campaign
        record.stage = 0
        self.send_next_event(prospect_id)
        return True

    # ── Replies ──────────────────────────────────────────────────────

    def process_response(self, prospect_id: str, message: str) -> ResponseResult | None:
        """Act on a prospect's reply.  ``None`` for an unknown prospect."""
        record = self.prospects.get(prospect_id)
        if record is None:
            return None

        handler = self.campaigns[record.current_campaign].match_handler(message)
        if handler is None:
            return ResponseResult(action="default_reply", reply=DEFAULT_REPLY)

        if handler.action == "move_campaign" and handler.target_campaign is not None:
            self.move_to_next_campaign(prospect_id, handler.target_campaign)
        elif handler.action == "book_appointment":
            self.book_appointment(prospect_id, message)
        elif handler.action == "mark_invalid":
            record.tags.add(INVALID_TAG)

        # Booking above may have attached the appointment the reply refers to.
        return ResponseResult(
            action=handler.action,
            reply=self.personalize_message(handler.reply, record.data),
            target_campaign=handler.target_campaign,
        )

    def personalize_message(self, message: str, prospect: Prospect) -> str:
        text = (
            message
            .replace("{{FirstName}}", prospect.first_name or "there")
            .replace("{{LastName}}", prospect.last_name or "")
            .replace("{{OfficeName}}", self.office_name)
        )
        if self.assignee_name:
            text = (
                text
                .replace("{{AssigneeFullName}}", self.assignee_name)
                .replace("{{AssigneeFirstName}}", self.assignee_name.split()[0])
            )
        if "{{wooai}}" in text:
            text = text.replace("{{wooai}}", self.generate_time_options())
        if prospect.appointment is not None:
            text = (
                text
                .replace("{{AppointmentDate}}", prospect.appointment.display_date)
                .replace("{{AppointmentTime}}", prospect.appointment.time)
            )
        return text

    def generate_time_options(self) -> str:
        """Three call slots tomorrow, e.g. ``"Tuesday at 2pm, 3pm, or 4pm"``."""
        tomorrow = self._clock() + timedelta(days=1)
        return f"{tomorrow:%A} at 2pm, 3pm, or 4pm"

    # ── Appointments ─────────────────────────────────────────────────

    def book_appointment(self, prospect_id: str, message: str) -> Appointment | None:
        """Book a call tomorrow at the time hinted in *message* (3:00 PM otherwise)."""
        record = self.prospects.get(prospect_id)
        if record is None:
            return None

        slot = DEFAULT_APPOINTMENT_TIME
        if "2pm" in message or "2 pm" in message:
            slot = "2:00 PM"
        elif "4pm" in message or "4 pm" in message:
            slot = "4:00 PM"

        appointment = Appointment(
            id=f"apt_{time.time_ns()}",
            prospect_id=prospect_id,
            scheduled_on=self._clock() + timedelta(days=1),
            time=slot,
        )
        self.appointments[appointment.id] = appointment
        record.data.appointment = appointment
        record.tags.add(APPOINTMENT_TAG)
        self._schedule_reminders(prospect_id, appointment)
        return appointment

    def _schedule_reminders(self, prospect_id: str, appointment: Appointment) -> None:
        logger.info(
            "[Reminder] 24-hour reminder scheduled for %s on %s at %s",
            prospect_id, appointment.display_date, appointment.time,
        )
        logger.info(
            "[Reminder] 2-hour reminder scheduled for %s for %s",
            prospect_id, appointment.service,
        )
        logger.info(
            "[Reminder] 15-minute reminder scheduled for %s, appointment ID: %s",
            prospect_id, appointment.id,
        )

    # ── Batch operations ─────────────────────────────────────────────

    def activate_power_hour(self, count: int = 25) -> int:
        """Move up to *count* holding prospects into the power hour campaign."""
        holding = [
            pid for pid, record in self.prospects.items()
            if record.current_campaign == CampaignType.HOLDING
        ][:count]
        moved = sum(
            1 for pid in holding
            if self.move_to_next_campaign(pid, CampaignType.POWER_HOUR)
        )
        logger.info("[Power Hour] Activated for %d prospects", moved)
        return moved

    def check_no_shows(self, today: date | None = None) -> int:
        """Mark scheduled appointments dated before yesterday as no-shows."""
        yesterday = (today or self._clock()) - timedelta(days=1)
        missed = [
            apt for apt in self.appointments.values()
            if apt.status == "scheduled" and apt.scheduled_on < yesterday
        ]
        for appointment in missed:
            appointment.status = "no-show"
            self.move_to_next_campaign(appointment.prospect_id, CampaignType.NO_SHOW)
        logger.info("[No-Shows] Processed %d no-shows", len(missed))
        return len(missed)
