"""Tests for the SDR campaign manager."""

from __future__ import annotations

from datetime import date

import pytest

from dental_hub.sdr.campaigns import CampaignType, build_campaigns
from dental_hub.sdr.manager import DEFAULT_REPLY, CampaignManager, Prospect

TODAY = date(2026, 10, 19)  # a Monday


@pytest.fixture
def manager():
    return CampaignManager("Test Dental", clock=lambda: TODAY)


def _add(manager, prospect_id="p1", first_name="Jane", campaign=CampaignType.LIST_VALIDATION):
    manager.add_prospect(Prospect(id=prospect_id, first_name=first_name), campaign)
    return manager.prospects[prospect_id]


class TestCampaignDefinitions:
    def test_all_campaigns_defined(self):
        assert set(build_campaigns()) == set(CampaignType)

    def test_campaign_chain(self):
        chain = {kind: c.next_campaign for kind, c in build_campaigns().items()}
        assert chain[CampaignType.LIST_VALIDATION] == CampaignType.COLD_OFFER
        assert chain[CampaignType.COLD_OFFER] == CampaignType.NO_RESPONSE
        assert chain[CampaignType.LEAD_GENERATION] == CampaignType.NO_RESPONSE
        assert chain[CampaignType.NO_RESPONSE] == CampaignType.RE_ENGAGEMENT
        assert chain[CampaignType.NO_SHOW] == CampaignType.RE_ENGAGEMENT
        assert chain[CampaignType.RE_ENGAGEMENT] == CampaignType.HOLDING
        assert chain[CampaignType.POWER_HOUR] == CampaignType.HOLDING
        assert chain[CampaignType.HOLDING] is None

    def test_holding_has_no_outreach(self):
        assert build_campaigns()[CampaignType.HOLDING].automation_events == []


class TestProspectFlow:
    def test_add_prospect_sends_first_event(self, manager):
        record = _add(manager)

        assert record.current_campaign == CampaignType.LIST_VALIDATION
        assert record.stage == 1
        assert record.outbox[0].message == (
            "Hey is this Jane? Are you there? Is this Jane's number?"
        )

    def test_missing_first_name_defaults_to_there(self, manager):
        record = _add(manager, first_name="")
        assert record.outbox[0].message.startswith("Hey is this there?")

    def test_end_of_campaign_moves_to_next(self, manager):
        record = _add(manager)
        events = len(manager.campaigns[CampaignType.LIST_VALIDATION].automation_events)
        for _ in range(events - 1):
            assert manager.send_next_event("p1")

        assert manager.send_next_event("p1")  # past the last event

        assert record.current_campaign == CampaignType.COLD_OFFER
        assert record.stage == 1
        assert [h.campaign for h in record.history] == [CampaignType.LIST_VALIDATION]

    def test_holding_sends_nothing(self, manager):
        _add(manager, campaign=CampaignType.HOLDING)
        assert manager.send_next_event("p1") is False
        assert manager.prospects["p1"].outbox == []

    def test_unknown_prospect(self, manager):
        assert manager.send_next_event("nobody") is False
        assert manager.move_to_next_campaign("nobody", CampaignType.HOLDING) is False
        assert manager.process_response("nobody", "yes") is None
        assert manager.book_appointment("nobody", "2pm") is None


class TestResponses:
    def test_confirmation_moves_to_cold_offer(self, manager):
        _add(manager)
        result = manager.process_response("p1", "Yes, this is Jane")

        assert result.action == "move_campaign"
        assert result.target_campaign == CampaignType.COLD_OFFER
        assert manager.prospects["p1"].current_campaign == CampaignType.COLD_OFFER

    def test_wrong_number_is_marked_invalid(self, manager):
        _add(manager)
        result = manager.process_response("p1", "wrong number")

        assert result.action == "mark_invalid"
        assert "invalid_contact" in manager.prospects["p1"].tags
        assert manager.prospects["p1"].current_campaign == CampaignType.LIST_VALIDATION

    def test_unmatched_reply_gets_default(self, manager):
        _add(manager, campaign=CampaignType.COLD_OFFER)
        result = manager.process_response("p1", "hmm maybe")
        assert result.action == "default_reply"
        assert result.reply == DEFAULT_REPLY

    def test_opt_out_moves_to_holding(self, manager):
        _add(manager, campaign=CampaignType.COLD_OFFER)
        result = manager.process_response("p1", "STOP texting me")

        assert result.target_campaign == CampaignType.HOLDING
        assert manager.prospects["p1"].current_campaign == CampaignType.HOLDING

    def test_holding_reply_re_engages(self, manager):
        _add(manager, campaign=CampaignType.HOLDING)
        manager.process_response("p1", "tell me more")

        record = manager.prospects["p1"]
        assert record.current_campaign == CampaignType.RE_ENGAGEMENT
        assert record.stage == 1


class TestBooking:
    def test_booking_reply_mentions_appointment(self, manager):
        _add(manager, campaign=CampaignType.COLD_OFFER)
        result = manager.process_response("p1", "3pm works")

        assert result.action == "book_appointment"
        assert "You're all set for a call on Tuesday, October 20 at 3:00 PM." in result.reply
        record = manager.prospects["p1"]
        assert "appointment_scheduled" in record.tags
        assert record.data.appointment.scheduled_on == date(2026, 10, 20)
        assert record.data.appointment.service == "Enhanced Dental PPO Coverage Consultation"

    @pytest.mark.parametrize(
        ("message", "slot"),
        [("2pm please", "2:00 PM"), ("tomorrow at 4 pm", "4:00 PM"), ("tomorrow", "3:00 PM")],
    )
    def test_time_hint(self, manager, message, slot):
        _add(manager)
        assert manager.book_appointment("p1", message).time == slot

    def test_appointment_is_tracked(self, manager):
        _add(manager)
        appointment = manager.book_appointment("p1", "2pm")
        assert manager.appointments[appointment.id].prospect_id == "p1"
        assert appointment.status == "scheduled"


class TestPersonalization:
    def test_time_options_are_for_tomorrow(self, manager):
        prospect = Prospect(id="x", first_name="Sam")
        assert manager.personalize_message("Free {{wooai}}?", prospect) == (
            "Free Tuesday at 2pm, 3pm, or 4pm?"
        )

    def test_office_and_last_name(self, manager):
        prospect = Prospect(id="x", first_name="Sam", last_name="Lee")
        text = manager.personalize_message("{{FirstName}} {{LastName}} at {{OfficeName}}", prospect)
        assert text == "Sam Lee at Test Dental"

    def test_assignee_placeholders(self):
        manager = CampaignManager("Test Dental", assignee_name="Dana Reyes")
        text = manager.personalize_message(
            "{{AssigneeFirstName}} / {{AssigneeFullName}}", Prospect(id="x"),
        )
        assert text == "Dana / Dana Reyes"

    def test_blank_assignee_leaves_placeholders(self):
        manager = CampaignManager("Test Dental", assignee_name="  ")
        text = manager.personalize_message("Hi, {{AssigneeFirstName}} here", Prospect(id="x"))
        assert text == "Hi, {{AssigneeFirstName}} here"

    def test_appointment_placeholders_untouched_without_appointment(self, manager):
        text = manager.personalize_message("{{AppointmentTime}}", Prospect(id="x"))
        assert text == "{{AppointmentTime}}"


class TestBatchOperations:
    def test_power_hour_moves_up_to_count(self, manager):
        for pid in ("a", "b", "c"):
            _add(manager, prospect_id=pid, campaign=CampaignType.HOLDING)
        _add(manager, prospect_id="d", campaign=CampaignType.COLD_OFFER)

        assert manager.activate_power_hour(2) == 2

        campaigns = {pid: r.current_campaign for pid, r in manager.prospects.items()}
        assert campaigns == {
            "a": CampaignType.POWER_HOUR,
            "b": CampaignType.POWER_HOUR,
            "c": CampaignType.HOLDING,
            "d": CampaignType.COLD_OFFER,
        }
        assert manager.prospects["a"].stage == 1

    def test_no_show_detection(self, manager):
        _add(manager)
        appointment = manager.book_appointment("p1", "2pm")  # Oct 20

        assert manager.check_no_shows(today=date(2026, 10, 21)) == 0
        assert manager.check_no_shows(today=date(2026, 10, 22)) == 1

        assert appointment.status == "no-show"
        assert manager.prospects["p1"].current_campaign == CampaignType.NO_SHOW
        # already processed
        assert manager.check_no_shows(today=date(2026, 10, 30)) == 0
