from .probe import RECENT_ITEMS_LOCATIONS, RecentItemsProbe

__all__ = ["RECENT_ITEMS_LOCATIONS", "RecentItemsProbe"]
