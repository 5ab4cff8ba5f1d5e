# export.py
import io

import pandas as pd
from flask import send_file

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def to_excel_bytes(records, sheet_name='Data'):
    """Records (list of dicts or a DataFrame) -> xlsx file contents."""
    df = records.copy() if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
    for col in df.columns:
        # openpyxl cannot write list/dict cells
        if df[col].map(lambda v: isinstance(v, (list, dict))).any():
            df[col] = df[col].map(lambda v: ', '.join(map(str, v)) if isinstance(v, list) else str(v))
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return output.getvalue()


def excel_response(records, filename, sheet_name='Data'):
    output = io.BytesIO(to_excel_bytes(records, sheet_name))
    return send_file(output, mimetype=XLSX_MIMETYPE, download_name=filename, as_attachment=True)
