# fees/urls.py

from django.urls import path
from . import views, ajax_views

app_name = 'fees'

urlpatterns = [
    # =============================================================================
    # SUMMARY & BALANCES
    # =============================================================================
    path('summary/', ajax_views.finance_summary, name='finance_summary'),
    path('students/<uuid:student_id>/balance/', ajax_views.student_balance, name='student_balance'),


    # =============================================================================
    # DATA ENTRY
    # =============================================================================
    path('structures/create/', ajax_views.create_fee_structure, name='fee_structure_create'),
    path('payments/record/', ajax_views.record_payment, name='payment_record'),


    # =============================================================================
    # EXPORTS
    # =============================================================================
    path('classes/<uuid:class_id>/balances/export/', views.export_class_balances_excel, name='class_balances_export'),
]
