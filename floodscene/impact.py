"""Flood impact summaries and dashboard wording."""

from .models import ImpactSummary

UNNAMED_AREA = "พื้นที่ไม่ระบุชื่อ"

WATCH_LEVEL = 2.0


def area_name(properties) -> str:
    """Human-readable area of a GISTDA feature.

    Tambon + amphoe, then amphoe alone, tambon alone, the feature id, and
    finally a fixed placeholder.
    """
    if not isinstance(properties, dict):
        properties = {}
    tambon = properties.get('tb_tn')
    amphoe = properties.get('ap_tn')

    if tambon and amphoe:
        return f"ต.{tambon} อ.{amphoe}"
    if amphoe:
        return f"อ.{amphoe}"
    if tambon:
        return f"ต.{tambon}"
    if properties.get('id'):
        return f"Area ID: {properties['id']}"
    return UNNAMED_AREA


def summarize_impact(collection) -> list:
    """Count flood features per area, largest first.

    Every feature lands in exactly one bucket.  Equal counts keep the order
    in which their area was first seen.
    """
    counts = {}
    for feature in (collection or {}).get('features') or []:
        properties = feature.get('properties') if isinstance(feature, dict) else None
        name = area_name(properties)
        counts[name] = counts.get(name, 0) + 1

    summaries = [ImpactSummary(name, count) for name, count in counts.items()]
    return sorted(summaries, key=lambda s: s.count, reverse=True)


def water_status(level: float):
    """``(key, label)`` describing a simulated water level."""
    if level <= 0:
        return 'normal', "ระดับน้ำปกติ"
    if level < WATCH_LEVEL:
        return 'watch', "เฝ้าระวังน้ำล้นตลิ่ง"
    return 'critical', "วิกฤตน้ำท่วมสูง"


def weather_summary(report):
    """Short rain/clear line for the dashboard, None without weather."""
    if report is None:
        return None
    current = report.current
    if report.is_raining:
        return f"ฝนตก: {current.rain + current.showers:.1f} mm"
    return "ท้องฟ้าแจ่มใส"
