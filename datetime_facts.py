#!/usr/bin/env python3
"""
Date utilities with fiscal year and quarter information.

The fiscal year starts on May 1st and is labelled with the calendar year in
which it ends, so 2025-05-01 falls in fiscal year 2026.
"""

from datetime import date, timedelta
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

FISCAL_YEAR_START_MONTH = 5  # May
WORKING_DAYS = 5


class DateFact(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    fiscal_year: int = Field(alias="fiscalYear")
    fiscal_quarter: int = Field(alias="fiscalQuarter", ge=1, le=4)


class WorkingWeek(BaseModel):
    days: List[DateFact]


def get_fiscal_year(day: date) -> int:
    if day.month < FISCAL_YEAR_START_MONTH:
        return day.year
    return day.year + 1


def get_fiscal_quarter(day: date) -> int:
    """Q1 (May-Jul), Q2 (Aug-Oct), Q3 (Nov-Jan), Q4 (Feb-Apr)"""
    months_into_fiscal_year = (day.month - FISCAL_YEAR_START_MONTH) % 12
    return months_into_fiscal_year // 3 + 1


def date_fact(day: date) -> DateFact:
    return DateFact(
        date=day.isoformat(),
        fiscal_year=get_fiscal_year(day),
        fiscal_quarter=get_fiscal_quarter(day),
    )


def get_today(today: Optional[date] = None) -> DateFact:
    """Get today's date with fiscal year and quarter information"""
    return date_fact(today or date.today())


def get_working_week(today: Optional[date] = None) -> WorkingWeek:
    """Get Monday to Friday of the current week.

    Weeks start on Monday, so on a Sunday this is the week that just ended.
    """
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    return WorkingWeek(
        days=[date_fact(monday + timedelta(days=offset)) for offset in range(WORKING_DAYS)]
    )
