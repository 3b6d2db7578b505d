# fees/admin.py

from django.contrib import admin
from .models import FeeStructure, FeePayment


@admin.register(FeeStructure)
class FeeStructureAdmin(admin.ModelAdmin):
    list_display = ['school_class', 'academic_year', 'tuition_fee', 'exam_fee', 'other_fee', 'total_fee', 'is_active']
    list_filter = ['is_active', 'academic_year', 'fee_type']
    readonly_fields = ['total_fee', 'amount']


@admin.register(FeePayment)
class FeePaymentAdmin(admin.ModelAdmin):
    list_display = ['receipt_number', 'student', 'amount_paid', 'payment_date', 'payment_method', 'status']
    list_filter = ['status', 'payment_method', 'academic_year']
    search_fields = ['receipt_number', 'student__full_name', 'student__admission_number']
    raw_id_fields = ['student']
    date_hierarchy = 'payment_date'
