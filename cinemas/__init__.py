from cinemas.base import BaseAdapter
from cinemas.cinema_city import CinemaCityAdapter
from cinemas.html import SITE_RULES, HtmlAdapter
from cinemas.multikino import MultikinoAdapter
from models import Venue

ADAPTER_TYPES: dict[Venue, type[BaseAdapter]] = {
    **{venue: HtmlAdapter for venue in SITE_RULES},
    Venue.MULTIKINO: MultikinoAdapter,
    Venue.CCITY_BONARKA: CinemaCityAdapter,
    Venue.CCITY_KAZIMIERZ: CinemaCityAdapter,
    Venue.CCITY_ZAKOPIANKA: CinemaCityAdapter,
}


def all_adapters() -> list[BaseAdapter]:
    """One fresh adapter per venue, in Venue order."""
    return [ADAPTER_TYPES[venue](venue) for venue in Venue]
