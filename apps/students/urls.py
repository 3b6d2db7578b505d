# students/urls.py

from django.urls import path
from . import ajax_views

app_name = 'students'

urlpatterns = [
    path('search/', ajax_views.student_search, name='student_search'),
    path('register/', ajax_views.student_register, name='student_register'),
    path('<uuid:student_id>/', ajax_views.student_profile, name='student_profile'),
]
