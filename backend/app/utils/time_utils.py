"""
北京时间工具
全系统统一按 UTC+8 处理日期，数据库中保存的是去掉时区信息的北京时间。
"""
from datetime import date, datetime, time, timedelta, timezone

# 上海时区 (UTC+8)
SHANGHAI_TZ = timezone(timedelta(hours=8))


def get_shanghai_now() -> datetime:
    return datetime.now(SHANGHAI_TZ).replace(tzinfo=None)


def to_shanghai(moment: datetime) -> datetime:
    """将任意时间转换为无时区的北京时间，无时区输入视为已是北京时间"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(SHANGHAI_TZ).replace(tzinfo=None)


def get_shanghai_today() -> date:
    return get_shanghai_now().date()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """返回 [当天 0 点, 次日 0 点)"""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def form_title(day: date) -> str:
    """收集表标题，如 2026年02月04日 选题收集"""
    return f"{day.strftime('%Y年%m月%d日')} 选题收集"

