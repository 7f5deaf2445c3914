"""
Fetch UQ assessment schedules for course codes and export them as text and iCalendar.
"""
__version__ = "0.1.0"
