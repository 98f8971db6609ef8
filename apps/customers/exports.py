import csv

import openpyxl
from django.http import HttpResponse
from django.utils import timezone
from openpyxl.styles import Font, PatternFill

from apps.core.settings_store import find_badge, get_category_badges, get_column_labels, get_status_badges


# Columns in export order
EXPORT_COLUMNS = (
    'category', 'status', 'name', 'phone', 'birth_date', 'gender', 'address', 'address_detail',
    'occupation', 'income', 'employment_period', 'existing_loans', 'loan_amount', 'loan_purpose',
    'credit_score', 'required_amount', 'fund_purpose', 'has_overdue', 'has_license', 'has_insurance',
    'has_credit_card', 'assigned_to', 'branch_id', 'notes', 'callback_date', 'created_at', 'updated_at',
)

DATETIME_FORMAT = '%Y-%m-%d %H:%M'
HEADER_FILL_COLOR = '3B82F6'
MAX_COLUMN_WIDTH = 50


def _cell_value(customer, column, status_badges, category_badges):
    if column == 'status':
        return find_badge(status_badges, customer.status)['label']
    if column == 'category':
        return find_badge(category_badges, customer.category)['label']
    if column == 'assigned_to':
        return customer.assigned_to.name if customer.assigned_to else ''
    if column == 'branch_id':
        return customer.branch.name if customer.branch else ''
    if column.startswith('has_'):
        return 'O' if getattr(customer, column) else 'X'
    if column in ('callback_date', 'created_at', 'updated_at'):
        value = getattr(customer, column)
        return timezone.localtime(value).strftime(DATETIME_FORMAT) if value else ''
    value = getattr(customer, column)
    return '' if value is None else value


def export_rows(customers):
    """Header row followed by one localized row per customer"""
    labels = get_column_labels()
    status_badges = get_status_badges()
    category_badges = get_category_badges()

    yield [labels.get(column, column) for column in EXPORT_COLUMNS]
    for customer in customers:
        yield [_cell_value(customer, column, status_badges, category_badges) for column in EXPORT_COLUMNS]


def _filename(extension):
    return f'customers_{timezone.localtime().strftime("%Y%m%d_%H%M%S")}.{extension}'


def build_excel_response(customers):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Customers"

    for row_index, row in enumerate(export_rows(customers), start=1):
        for col_index, value in enumerate(row, start=1):
            cell = ws.cell(row=row_index, column=col_index, value=value)
            if row_index == 1:
                cell.font = Font(bold=True, color="FFFFFF")
                cell.fill = PatternFill(start_color=HEADER_FILL_COLOR, end_color=HEADER_FILL_COLOR, fill_type="solid")

    # Adjust column widths
    for col in ws.columns:
        max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in col)
        ws.column_dimensions[col[0].column_letter].width = min(max_length + 2, MAX_COLUMN_WIDTH)

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{_filename("xlsx")}"'
    wb.save(response)
    return response


def build_csv_response(customers):
    response = HttpResponse(content_type='text/csv; charset=utf-8-sig')
    response['Content-Disposition'] = f'attachment; filename="{_filename("csv")}"'

    # Write BOM for Excel UTF-8 compatibility
    response.write('\ufeff')

    writer = csv.writer(response)
    for row in export_rows(customers):
        writer.writerow(row)
    return response
