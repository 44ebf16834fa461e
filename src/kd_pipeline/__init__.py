"""KanjiDamage vocabulary extraction pipeline package."""

from .maybe import Absent, Maybe, Present
from .models import JukugoEntry, KunyomiEntry, PageRecord

__all__ = ["Maybe", "Present", "Absent", "PageRecord", "KunyomiEntry", "JukugoEntry"]
