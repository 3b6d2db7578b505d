# attendance/admin.py

from django.contrib import admin
from .models import AttendanceRecord, AttendanceNotification


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ['attendance_date', 'student', 'is_present', 'remarks']
    list_filter = ['is_present', 'attendance_date', 'student__school_class']
    search_fields = ['student__full_name', 'student__admission_number']
    raw_id_fields = ['student']
    date_hierarchy = 'attendance_date'


@admin.register(AttendanceNotification)
class AttendanceNotificationAdmin(admin.ModelAdmin):
    list_display = ['school_class', 'notification_time', 'is_enabled']
    list_filter = ['is_enabled']
