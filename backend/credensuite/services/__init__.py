from credensuite.services.activity_service import ActivityLog, activity_log
from credensuite.services.member_id_sequencer import MemberIdSequencer, member_id_sequencer
from credensuite.services.member_service import MemberService, member_service
from credensuite.services.settings_service import SettingsService, settings_service
from credensuite.services.template_service import TemplateService, template_service
from credensuite.services.stats_service import StatsService, stats_service
from credensuite.services.badge_renderer import BadgeRenderer, badge_renderer

__all__ = [
    "ActivityLog",
    "activity_log",
    "MemberIdSequencer",
    "member_id_sequencer",
    "MemberService",
    "member_service",
    "SettingsService",
    "settings_service",
    "TemplateService",
    "template_service",
    "StatsService",
    "stats_service",
    "BadgeRenderer",
    "badge_renderer",
]
