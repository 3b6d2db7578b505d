# attendance/urls.py

from django.urls import path
from . import ajax_views

app_name = 'attendance'

urlpatterns = [
    path('summary/', ajax_views.attendance_summary, name='summary'),
    path('classes/<uuid:class_id>/mark/', ajax_views.mark_class_attendance, name='mark_class'),
    path('classes/<uuid:class_id>/reminder/', ajax_views.update_notification_settings, name='reminder_settings'),
    path('missing/', ajax_views.missing_attendance, name='missing'),
]
