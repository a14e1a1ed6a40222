"""Outreach campaign definitions for the SDR agent.

A campaign is an ordered list of automation events (texts, emails, AI voice
calls, voicemail drops) plus keyword handlers for prospect replies.  When a
prospect reaches the end of a campaign they move on to ``next_campaign``.

Message templates use ``{{Placeholder}}`` tokens that
:meth:`CampaignManager.personalize_message` fills in.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

EventType = Literal["sms", "email", "ai_voice_call", "voicemail_drop"]
ResponseAction = Literal[
    "offer_times", "book_appointment", "move_campaign", "mark_invalid", "default_reply",
]


class CampaignType(StrEnum):
    LEAD_GENERATION = "leadGeneration"
    NO_RESPONSE = "noResponse"
    NO_SHOW = "noShow"
    RE_ENGAGEMENT = "reEngagement"
    LIST_VALIDATION = "listValidation"
    COLD_OFFER = "coldOffer"
    POWER_HOUR = "powerHour"
    HOLDING = "holding"


class AutomationEvent(BaseModel):
    type: EventType
    name: str
    timing: str
    message: str
    subject: str | None = None


class ResponseHandler(BaseModel):
    keywords: list[str]
    action: ResponseAction
    reply: str
    target_campaign: CampaignType | None = None


class Campaign(BaseModel):
    name: str
    next_campaign: CampaignType | None = None
    automation_events: list[AutomationEvent] = Field(default_factory=list)
    response_handlers: list[ResponseHandler] = Field(default_factory=list)

    def match_handler(self, message: str) -> ResponseHandler | None:
        """First handler with any keyword contained in *message*."""
        text = message.lower()
        for handler in self.response_handlers:
            if any(keyword.lower() in text for keyword in handler.keywords):
                return handler
        return None


# ── Shared handlers ──────────────────────────────────────────────────

_TIME_KEYWORDS = ["2pm", "3pm", "4pm", "tomorrow", "time works"]
_OPT_OUT_KEYWORDS = ["no", "not interested", "stop", "unsubscribe"]


def _offer_times(keywords: list[str], reply: str | None = None) -> ResponseHandler:
    return ResponseHandler(
        keywords=keywords,
        action="offer_times",
        reply=reply or (
            "Great! Would tomorrow at 2pm, 3pm, or 4pm work for a quick call to "
            "discuss our Enhanced Dental PPO Coverage options?"
        ),
    )


def _book(topic: str = "your Enhanced Dental PPO Coverage options") -> ResponseHandler:
    return ResponseHandler(
        keywords=_TIME_KEYWORDS,
        action="book_appointment",
        reply=(
            "Perfect! You're all set for a call on {{AppointmentDate}} at "
            f"{{{{AppointmentTime}}}}. I'll give you a call then to discuss {topic}. "
            "If anything comes up before then, feel free to reach out!"
        ),
    )


def _opt_out(
    reply: str = (
        "I understand. If you change your mind about improving your dental "
        "coverage, feel free to reach out anytime!"
    ),
) -> ResponseHandler:
    return ResponseHandler(
        keywords=_OPT_OUT_KEYWORDS,
        action="move_campaign",
        target_campaign=CampaignType.HOLDING,
        reply=reply,
    )


# ── Campaigns ────────────────────────────────────────────────────────


def _list_validation() -> Campaign:
    return Campaign(
        name="List Validation",
        next_campaign=CampaignType.COLD_OFFER,
        automation_events=[
            AutomationEvent(
                type="sms", name="Confirm their name SMS", timing="Send after opt in",
                message="Hey is this {{FirstName}}? Are you there? Is this {{FirstName}}'s number?",
            ),
            AutomationEvent(
                type="email", name="Is this your email?", timing="06:00 AM",
                subject="{{FirstName}}, quick question",
                message=(
                    "Hey {{FirstName}}, I hope this email finds you well. I'm currently "
                    "working with dental patients to help them with a cosmetic dental "
                    "grant. It can provide significant savings on procedures like "
                    "veneers, crowns, and implants. Is this your current email address?"
                ),
            ),
            AutomationEvent(
                type="ai_voice_call", name="Verification Call", timing="12:00 PM",
                message=(
                    "Hello, I'm calling for {{FirstName}}. This is {{AssigneeFirstName}} "
                    "with {{OfficeName}}. We're reaching out to eligible individuals in "
                    "your area about our cosmetic dental grant program. I just need to "
                    "verify that I'm speaking with {{FirstName}}."
                ),
            ),
            AutomationEvent(
                type="sms", name="Compliance Text Message", timing="05:00 PM",
                message=(
                    "Hey, this is {{AssigneeFullName}} with {{OfficeName}}. Is this "
                    "{{FirstName}}? If this is not, please respond back with NO."
                ),
            ),
        ],
        response_handlers=[
            ResponseHandler(
                keywords=["yes", "yeah", "correct", "speaking", "this is", "right"],
                action="move_campaign",
                target_campaign=CampaignType.COLD_OFFER,
                reply=(
                    "Great! Thanks for confirming. I'll send you some information "
                    "about our dental services shortly."
                ),
            ),
            ResponseHandler(
                keywords=["no", "wrong", "not", "who", "not me"],
                action="mark_invalid",
                reply="I apologize for the confusion. I'll update our records. Have a great day!",
            ),
        ],
    )


def _cold_offer() -> Campaign:
    return Campaign(
        name="Cold Offer",
        next_campaign=CampaignType.NO_RESPONSE,
        automation_events=[
            AutomationEvent(
                type="sms", name="Initial Offer", timing="09:00 AM",
                message=(
                    "Hey {{FirstName}}, {{AssigneeFirstName}} here from {{OfficeName}}. "
                    "Right now we're helping patients get access to exclusive dental "
                    "care through our Enhanced PPO program. Would you like to hear more?"
                ),
            ),
            AutomationEvent(
                type="ai_voice_call", name="Initial Cold Call", timing="11:00 AM",
                message=(
                    "Hello {{FirstName}}, this is {{AssigneeFirstName}} with "
                    "{{OfficeName}}. We're currently helping patients in your area save "
                    "up to 60% on dental procedures through our Enhanced PPO program. "
                    "We have a limited number of spots available."
                ),
            ),
            AutomationEvent(
                type="email", name="Offer Details", timing="10:00 AM",
                subject="Exclusive Dental Savings Opportunity",
                message=(
                    "Hey {{FirstName}}, {{AssigneeFirstName}} here from {{OfficeName}}. "
                    "Our patients are saving an average of 60% on dental procedures "
                    "with our Enhanced Dental PPO program. Does {{wooai}} work for a "
                    "quick call?"
                ),
            ),
        ],
        response_handlers=[
            _offer_times(
                ["yes", "interested", "tell me more", "information", "savings", "spots", "available"],
                "Great! Would tomorrow at 2pm, 3pm, or 4pm work for a quick call to "
                "discuss our Enhanced Dental PPO program and how it can save you money?",
            ),
            _book("our Enhanced Dental PPO program"),
            _opt_out(
                "I understand. If you change your mind about saving on your dental "
                "care, feel free to reach out anytime!"
            ),
        ],
    )


def _lead_generation() -> Campaign:
    return Campaign(
        name="Lead Generation",
        next_campaign=CampaignType.NO_RESPONSE,
        automation_events=[
            AutomationEvent(
                type="sms", name="Thank You", timing="send_after_opt_in",
                message=(
                    "Hey {{FirstName}}, this is {{AssigneeFirstName}} with {{OfficeName}}. "
                    "Thanks for filling out our form for Enhanced Dental PPO Coverage!"
                ),
            ),
            AutomationEvent(
                type="email", name="Covering My Bases", timing="send_5_min_after_opt_in",
                subject="{{FirstName}}, Thanks for your inquiry",
                message=(
                    "Hey {{FirstName}}, this is {{AssigneeFullName}} with {{OfficeName}}. "
                    "Thanks for your interest in our Enhanced Dental PPO Coverage. Would "
                    "tomorrow at 2pm, 3pm, or 4pm work for a quick call?"
                ),
            ),
            AutomationEvent(
                type="ai_voice_call", name="Voice Call 1", timing="09:00 AM",
                message=(
                    "Hi {{FirstName}}, this is {{AssigneeFirstName}} with {{OfficeName}}. "
                    "I'm calling about your recent inquiry regarding our Enhanced Dental "
                    "PPO Coverage."
                ),
            ),
            AutomationEvent(
                type="sms", name="Checking In", timing="09:30 AM",
                message=(
                    "Hey {{FirstName}}. I just tried giving you a call. Would {{wooai}} "
                    "be a good time for us to connect?"
                ),
            ),
            AutomationEvent(
                type="sms", name="One Last Time", timing="10:00 AM",
                message=(
                    "Hey {{FirstName}}, please forgive me for being persistent, but I "
                    "wanted to follow up one last time. Are you free to talk {{wooai}}?"
                ),
            ),
        ],
        response_handlers=[
            _offer_times(["yes", "interested", "tell me more", "information"]),
            _book(),
            _opt_out(),
        ],
    )


def _no_response() -> Campaign:
    return Campaign(
        name="No Response",
        next_campaign=CampaignType.RE_ENGAGEMENT,
        automation_events=[
            AutomationEvent(
                type="sms", name="Checking Back In", timing="09:00 AM",
                message=(
                    "Hey {{FirstName}}, I wanted to check back in with you regarding "
                    "Enhanced Dental PPO Coverage. Would {{wooai}} work to discuss?"
                ),
            ),
            AutomationEvent(
                type="ai_voice_call", name="Voice Call 1", timing="09:00 AM",
                message=(
                    "Hi {{FirstName}}, this is {{AssigneeFirstName}} with {{OfficeName}}. "
                    "Many of our members are saving up to 60% on their dental procedures "
                    "with our plan."
                ),
            ),
            AutomationEvent(
                type="email", name="Still Interested", timing="07:00 PM",
                subject="{{FirstName}}, checking back in",
                message=(
                    "Hey {{FirstName}}, just wanted to follow up with you regarding "
                    "Enhanced Dental PPO Coverage. I'd be happy to explain how our "
                    "enhanced coverage can save you money."
                ),
            ),
            AutomationEvent(
                type="sms", name="Free to talk", timing="06:30 PM",
                message="Hey {{FirstName}}, haven't heard back. Are you free to talk {{wooai}}?",
            ),
        ],
        response_handlers=[
            _offer_times(["yes", "interested", "tell me more", "information"]),
            _book(),
            _opt_out(),
        ],
    )


def _no_show() -> Campaign:
    return Campaign(
        name="No Show",
        next_campaign=CampaignType.RE_ENGAGEMENT,
        automation_events=[
            AutomationEvent(
                type="ai_voice_call", name="Voice Call 1", timing="08:55 AM",
                message=(
                    "Hi {{FirstName}}, this is {{AssigneeFirstName}} with {{OfficeName}}. "
                    "I'm calling about our scheduled appointment that we missed yesterday. "
                    "My schedule is still open tomorrow at 2pm, 3pm, or 4pm - would any "
                    "of those times work for you?"
                ),
            ),
            AutomationEvent(
                type="sms", name="Missed You", timing="09:00 AM",
                message=(
                    "Hey {{FirstName}}, {{AssigneeFirstName}} here. Just following up on "
                    "your missed appointment. Does {{wooai}} work to give you a quick call?"
                ),
            ),
            AutomationEvent(
                type="voicemail_drop", name="VM 2", timing="09:00 AM",
                message=(
                    "Hey {{FirstName}}, it's {{AssigneeFirstName}} with {{OfficeName}}. "
                    "We're still holding your spot, but our schedule is filling up "
                    "quickly. Please give me a call back at {{AccountPhoneNumber}}."
                ),
            ),
            AutomationEvent(
                type="email", name="Keep It Open?", timing="08:00 PM",
                subject="{{FirstName}}, should I keep your spot?",
                message=(
                    "Hey {{FirstName}}, Appointments are filling up and I wanted to reach "
                    "out to you one last time. I have openings tomorrow at 2pm, 3pm, or "
                    "4pm. Does any of those times work for you?"
                ),
            ),
        ],
        response_handlers=[
            _offer_times(
                ["yes", "reschedule", "book", "appointment"],
                "Great! Would tomorrow at 2pm, 3pm, or 4pm work for your rescheduled appointment?",
            ),
            _book(),
            _opt_out(),
        ],
    )


def _re_engagement() -> Campaign:
    return Campaign(
        name="Re-Engagement",
        next_campaign=CampaignType.HOLDING,
        automation_events=[
            AutomationEvent(
                type="email", name="Free to talk", timing="Send after opt in",
                subject="Free to talk", message="Are you free to talk {{wooai}}?",
            ),
            AutomationEvent(
                type="ai_voice_call", name="Voice Call 1", timing="08:55 AM",
                message=(
                    "Hi {{FirstName}}, this is {{AssigneeFirstName}} with {{OfficeName}}. "
                    "You've shown interest in our Enhanced Dental PPO Coverage in the "
                    "past, and we've recently updated our plans to offer even better savings."
                ),
            ),
            AutomationEvent(
                type="sms", name="Free This Evening?", timing="12:00 PM",
                message="Hey {{FirstName}}, I hope all is well. Are you free to talk {{wooai}}?",
            ),
            AutomationEvent(
                type="email", name="No Luck", timing="08:00 PM", subject="{{FirstName}}",
                message=(
                    "Hey {{FirstName}}, I have been trying to get a hold of you for a "
                    "while but have had no luck. If you are no longer interested in our "
                    "services, please let me know."
                ),
            ),
        ],
        response_handlers=[
            _offer_times(["yes", "interested", "tell me more", "information"]),
            _book(),
            _opt_out(),
        ],
    )


def _power_hour() -> Campaign:
    return Campaign(
        name="Power Hour",
        next_campaign=CampaignType.HOLDING,
        automation_events=[
            AutomationEvent(
                type="ai_voice_call", name="Urgent Voice Call", timing="immediate",
                message=(
                    "Hello {{FirstName}}, this is {{AssigneeFirstName}} with "
                    "{{OfficeName}}. This month we're offering a special promotion for "
                    "our Enhanced Dental PPO Coverage with significant savings on all "
                    "dental procedures."
                ),
            ),
            AutomationEvent(
                type="sms", name="Limited Time Offer", timing="5_min_after_call",
                message=(
                    "Hey {{FirstName}}, I just tried giving you a call. Only 5 spots left "
                    "in your area! Would {{wooai}} work for a quick call?"
                ),
            ),
        ],
        response_handlers=[
            _offer_times(
                ["yes", "interested", "tell me more", "spots", "offer", "limited"],
                "Great! Would today at 2pm, 3pm, or 4pm work for a quick call? We need "
                "to act fast as these spots are filling quickly!",
            ),
            ResponseHandler(
                keywords=["2pm", "3pm", "4pm", "today", "time works"],
                action="book_appointment",
                reply=(
                    "Perfect! You're all set for a call today at {{AppointmentTime}}. "
                    "I'll give you a call then to secure your Enhanced Dental PPO "
                    "Coverage. If anything comes up before then, feel free to reach out!"
                ),
            ),
            _opt_out(),
        ],
    )


def _holding() -> Campaign:
    # Parking lot: no outreach, only wakes up when the prospect replies.
    return Campaign(
        name="Holding",
        response_handlers=[
            ResponseHandler(
                keywords=["yes", "interested", "tell me more"],
                action="move_campaign",
                target_campaign=CampaignType.RE_ENGAGEMENT,
                reply=(
                    "Great to hear from you! I'd be happy to tell you more about our "
                    "Enhanced Dental PPO Coverage options. Would tomorrow at 2pm, 3pm, "
                    "or 4pm work for a quick call?"
                ),
            ),
        ],
    )


def build_campaigns() -> dict[CampaignType, Campaign]:
    """Fresh campaign set, one per :class:`CampaignType`."""
    return {
        CampaignType.LEAD_GENERATION: _lead_generation(),
        CampaignType.NO_RESPONSE: _no_response(),
        CampaignType.NO_SHOW: _no_show(),
        CampaignType.RE_ENGAGEMENT: _re_engagement(),
        CampaignType.LIST_VALIDATION: _list_validation(),
        CampaignType.COLD_OFFER: _cold_offer(),
        CampaignType.POWER_HOUR: _power_hour(),
        CampaignType.HOLDING: _holding(),
    }
