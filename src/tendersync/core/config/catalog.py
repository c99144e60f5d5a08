"""
Known filter values for the external tender API.

The source accepts any integer, so these tables only drive CLI listings
and warnings for values the source is not known to understand.
"""

from __future__ import annotations


TENDER_CATEGORIES: dict[int, str] = {
    2: "Open (مفتوحة)",
    8: "Closed (مغلقة)",
}

TENDER_AREAS: dict[int, str] = {
    1: "منطقة الرياض",
    2: "منطقة مكة المكرمة",
    3: "منطقة المدينة المنورة",
    4: "منطقة القصيم",
    5: "المنطقة الشرقية",
    6: "منطقة عسير",
    7: "منطقة تبوك",
    8: "منطقة حائل",
    9: "منطقة الحدود الشمالية",
    10: "منطقة جازان",
    11: "منطقة نجران",
    12: "منطقة الباحة",
    13: "منطقة الجوف",
}

TENDER_ACTIVITIES: dict[int, str] = {
    1: "التجارة",
    2: "المقاولات",
    3: "التشغيل والصيانة والنظافة للمنشآت",
    4: "العقارات والأراضي",
    5: "الصناعة والتعدين والتدوير",
    6: "الغاز والمياه والطاقة",
    7: "المناجم والبترول والمحاجر",
    8: "الإعلام والنشر والتوزيع",
    9: "الاتصالات وتقنية المعلومات",
    10: "الزراعة والصيد",
    11: "الرعاية الصحية والنقاهة",
    12: "التعليم والتدريب",
    13: "التوظيف والاستقدام",
    14: "الأمن والسلامة",
    15: "النقل والبريد والتخزين",
    16: "المهن الاستشارية",
    17: "السياحة والمطاعم والفنادق وتنظيم المعارض",
    18: "المالية والتمويل والتأمين",
    19: "الخدمات الأخرى",
}

# Projection used by the dashboard when no fields are requested
DEFAULT_FIELDS: list[str] = [
    "tenderId",
    "tenderName",
    "tenderNumber",
    "agencyName",
    "tenderIdString",
]


def unknown_filters(
    tender_category: int | None = None,
    tender_activity_id: int | None = None,
    tender_areas_id: int | None = None,
) -> list[str]:
    """Describe filter values missing from the catalog.

    Returns:
        Human-readable notes, empty when every given value is known
    """
    notes: list[str] = []
    if tender_category and tender_category not in TENDER_CATEGORIES:
        notes.append(f"TenderCategory={tender_category} is not a known category")
    if tender_activity_id and tender_activity_id not in TENDER_ACTIVITIES:
        notes.append(f"TenderActivityId={tender_activity_id} is not a known activity")
    if tender_areas_id and tender_areas_id not in TENDER_AREAS:
        notes.append(f"TenderAreasIdString={tender_areas_id} is not a known area")
    return notes
