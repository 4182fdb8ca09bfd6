"""Campaign records as seen by the scheduler."""

from .models import Campaign, CampaignStatus, Placement

__all__ = ["Campaign", "CampaignStatus", "Placement"]
