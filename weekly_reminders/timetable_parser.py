import pandas as pd
import json
from typing import Any, Dict, List, Optional
from pathlib import Path

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday"]
WEEKDAY_ALIASES = {
    "mon": "monday", "tue": "tuesday", "tues": "tuesday", "wed": "wednesday",
    "thu": "thursday", "thur": "thursday", "thurs": "thursday", "fri": "friday"
}


class TimetableParser:
    """
    Parse a year group's timetable into the JSON handed to the generator.

    Two table shapes are accepted:
      - long:  one row per lesson with columns Day, Time (optional), Subject
      - wide:  one row per day, first column Day, remaining columns are periods
    Output is {"Monday": [{"time": "09:00", "subject": "PE"}, ...], ...}.
    """

    @staticmethod
    def parse_dataframe(df: pd.DataFrame) -> Dict[str, List[Dict[str, Any]]]:
        # Normalize column names
        df.columns = df.columns.astype(str).str.strip().str.lower()
        if "day" not in df.columns:
            raise ValueError(f"Timetable needs a 'day' column, found: {list(df.columns)}")

        timetable = {day.capitalize(): [] for day in WEEKDAY_NAMES}
        long_format = "subject" in df.columns

        for _, row in df.iterrows():
            day = TimetableParser._normalize_day(row.get("day"))
            if day is None:
                continue

            if long_format:
                subject = TimetableParser._clean(row.get("subject"))
                if subject:
                    timetable[day].append({"time": TimetableParser._clean(row.get("time")), "subject": subject})
            else:
                for column in df.columns:
                    if column == "day":
                        continue
                    subject = TimetableParser._clean(row.get(column))
                    if subject:
                        timetable[day].append({"time": column, "subject": subject})

        return timetable

    @staticmethod
    def _normalize_day(value: Any) -> Optional[str]:
        if pd.isna(value):
            return None
        day = str(value).strip().lower()
        day = WEEKDAY_ALIASES.get(day, day)
        return day.capitalize() if day in WEEKDAY_NAMES else None

    @staticmethod
    def _clean(value: Any) -> str:
        if value is None or pd.isna(value):
            return ""
        text = str(value).strip()
        return "" if text.lower() == "nan" else text

    @staticmethod
    def auto_parse(file_path: str) -> str:
        """
        Detect the file type and return the timetable as a JSON string.
        Supports: CSV, Excel (xlsx, xls), JSON
        """
        file_ext = Path(file_path).suffix.lower()

        if file_ext == ".json":
            # Validate and normalize formatting
            with open(file_path, encoding="utf-8") as f:
                return json.dumps(json.load(f), indent=2)
        elif file_ext == ".csv":
            df = pd.read_csv(file_path)
        elif file_ext in [".xlsx", ".xls"]:
            df = pd.read_excel(file_path)
        else:
            raise ValueError(f"Unsupported file format: {file_ext}. Use .csv, .xlsx, or .json")

        return json.dumps(TimetableParser.parse_dataframe(df), indent=2)
