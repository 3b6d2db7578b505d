# academics/urls.py

from django.urls import path
from . import views, ajax_views

app_name = 'academics'

urlpatterns = [
    # =============================================================================
    # LEADERBOARDS
    # =============================================================================
    path('leaderboard/class/<uuid:class_id>/', ajax_views.class_leaderboard, name='class_leaderboard'),
    path('leaderboard/school/', ajax_views.school_leaderboard, name='school_leaderboard'),
    path('subjects/performance/<uuid:class_id>/', ajax_views.subject_performance, name='subject_performance'),


    # =============================================================================
    # REPORT CARDS
    # =============================================================================
    path('students/<uuid:student_id>/report/', ajax_views.student_report, name='student_report'),
    path('scores/record/', ajax_views.record_score, name='record_score'),


    # =============================================================================
    # EXPORTS
    # =============================================================================
    path('leaderboard/class/<uuid:class_id>/export/', views.export_class_leaderboard_excel, name='class_leaderboard_export'),
    path('students/<uuid:student_id>/report/pdf/', views.export_report_card_pdf, name='report_card_pdf'),
]
