from io import BytesIO
from typing import Mapping, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")


def set_header(ws, headers: Sequence[str], widths: Sequence[int]):
    """写表头并设置列宽"""
    ws.append(list(headers))
    for index, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _rate(part: int, total: int) -> str:
    return f"{part / total * 100:.1f}%" if total else "0%"


def export_report(
    topics: Sequence,
    contribution: Sequence[Mapping],
    progress_stats: Mapping[str, int],
    status_stats: Mapping[str, int],
    month_keys: Sequence[str],
) -> bytes:
    """将入选选题数据导出为 Excel 报表"""
    wb = Workbook()

    # ========== 工作表1：选题进度明细 ==========
    detail = wb.active
    detail.title = "选题进度明细"
    set_header(
        detail,
        ["序号", "选题内容", "安排建议", "提报人", "进度", "状态", "创作人", "入选日期", "月份"],
        [8, 50, 14, 24, 10, 10, 20, 14, 10],
    )
    for topic in topics:
        detail.append([
            topic.id,
            topic.content,
            topic.suggestion or "",
            topic.submitters,
            topic.progress,
            topic.status,
            topic.creators or "",
            topic.selected_date.strftime("%Y-%m-%d") if topic.selected_date else "",
            topic.month_key,
        ])
    for row in detail.iter_rows(min_row=2, min_col=2, max_col=2):
        for cell in row:
            cell.alignment = Alignment(wrap_text=True, vertical="top")

    # ========== 工作表2：月度贡献排行 ==========
    ranking = wb.create_sheet("月度贡献排行")
    set_header(ranking, ["排名", "姓名", "入选数量", "发布数量", "否决数量", "发布率(%)"], [8, 15, 12, 12, 12, 12])
    for index, item in enumerate(contribution, start=1):
        ranking.append([
            index,
            item["name"],
            item["selected_count"],
            item["published_count"],
            item["rejected_count"],
            item["publish_rate"],
        ])

    # ========== 工作表3：统计汇总 ==========
    summary = wb.create_sheet("统计汇总")
    set_header(summary, ["统计项", "数值"], [20, 30])
    total = sum(progress_stats.values())
    completed = progress_stats.get("已完成", 0)
    published = status_stats.get("已发布", 0)
    summary.append(["统计月份", ", ".join(month_keys)])
    summary.append(["入选选题总数", total])
    for progress, count in progress_stats.items():
        summary.append([f"进度：{progress}", count])
    for status, count in status_stats.items():
        summary.append([f"状态：{status}", count])
    summary.append(["完成率", _rate(completed, total)])
    summary.append(["发布率", _rate(published, total)])

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()
