from django.contrib import admin, messages
from django.urls import reverse
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin, TabularInline
from unfold.decorators import display, action
from unfold.contrib.filters.admin import RangeDateFilter, RangeDateTimeFilter

from .models import (
    Supplier, InventoryLocation, InventoryItem, PurchaseOrder, PurchaseOrderItem,
    InventoryStock, InventoryTransaction, DocumentSequence, InventorySettings
)
from .services import OrderLifecycle, PurchaseOrderService, ServiceError


STATUS_COLORS = {
    'DRAFT': 'info',
    'PENDING_APPROVAL': 'warning',
    'APPROVED': 'info',
    'SENT_TO_SUPPLIER': 'info',
    'PARTIALLY_RECEIVED': 'warning',
    'RECEIVED': 'success',
    'CANCELLED': 'danger',
    'CLOSED': 'success',
}


class PurchaseOrderItemInline(TabularInline):
    model = PurchaseOrderItem
    extra = 0
    fields = ('item', 'quantity_ordered', 'unit_cost', 'total_cost',
              'quantity_received', 'quantity_backordered', 'is_received')
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Supplier)
class SupplierAdmin(ModelAdmin):
    list_display = ['code', 'name', 'contact_person', 'email', 'phone', 'active_badge']
    list_filter = ['is_active']
    search_fields = ['code', 'name', 'contact_person', 'email']
    list_filter_submit = True

    fieldsets = (
        (_('Supplier'), {
            'fields': ('code', 'name', 'payment_terms', 'is_active')
        }),
        (_('Contact'), {
            'fields': ('contact_person', 'email', 'phone', 'address')
        }),
        (_('Notes'), {
            'fields': ('notes',)
        }),
    )

    @display(description=_("Active"), label=True)
    def active_badge(self, obj):
        return ('success', _("Active")) if obj.is_active else ('danger', _("Inactive"))


@admin.register(InventoryLocation)
class InventoryLocationAdmin(ModelAdmin):
    list_display = ['code', 'name', 'location_type', 'parent_location', 'is_active']
    list_filter = ['location_type', 'is_active']
    search_fields = ['code', 'name']


@admin.register(InventoryItem)
class InventoryItemAdmin(ModelAdmin):
    list_display = ['sku', 'name', 'category', 'unit_of_measure',
                    'average_cost', 'last_cost', 'on_hand', 'is_active']
    list_filter = ['category', 'is_active', 'is_lot_tracked', 'is_expirable']
    search_fields = ['sku', 'name', 'description']
    list_filter_submit = True
    readonly_fields = ['average_cost', 'last_cost']

    fieldsets = (
        (_('Item'), {
            'fields': ('sku', 'name', 'description', 'category', 'unit_of_measure', 'reorder_point')
        }),
        (_('Cost'), {
            'fields': ('unit_cost', 'average_cost', 'last_cost')
        }),
        (_('Tracking'), {
            'fields': ('is_lot_tracked', 'is_serialized', 'is_expirable', 'is_active')
        }),
    )

    @display(description=_("On hand"))
    def on_hand(self, obj):
        return sum(row.quantity_on_hand for row in obj.stock.all())


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(ModelAdmin):
    list_display = ['order_number', 'supplier_link', 'status_badge', 'order_date',
                    'expected_delivery_date', 'total_amount']
    list_filter = [
        'status',
        'supplier',
        ('order_date', RangeDateFilter),
    ]
    search_fields = ['order_number', 'supplier__name', 'notes']
    list_filter_submit = True
    list_fullwidth = True
    inlines = [PurchaseOrderItemInline]
    readonly_fields = ['order_number', 'status', 'order_date', 'subtotal', 'total_amount',
                       'requested_by', 'approved_by', 'approved_at', 'received_date']
    actions = ['submit_orders', 'send_orders', 'close_orders']

    fieldsets = (
        (_('Order'), {
            'fields': ('order_number', 'supplier', 'delivery_location', 'status')
        }),
        (_('Dates'), {
            'fields': ('order_date', 'expected_delivery_date', 'received_date')
        }),
        (_('Totals'), {
            'fields': ('subtotal', 'total_amount')
        }),
        (_('People'), {
            'fields': ('requested_by', 'approved_by', 'approved_at')
        }),
        (_('Notes'), {
            'fields': ('notes', 'terms')
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        if obj is not None and not OrderLifecycle.can(obj.status, OrderLifecycle.UPDATE):
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and not OrderLifecycle.can(obj.status, OrderLifecycle.DELETE):
            return False
        return super().has_delete_permission(request, obj)

    def save_model(self, request, obj, form, change):
        changes = {}
        for field in ('supplier', 'delivery_location'):
            if field in form.changed_data:
                changes[f'{field}_id'] = getattr(obj, f'{field}_id')
        for field in ('expected_delivery_date', 'notes', 'terms'):
            if field in form.changed_data:
                changes[field] = getattr(obj, field)
        PurchaseOrderService.update(obj.id, **changes)

    def delete_model(self, request, obj):
        PurchaseOrderService.delete(obj.id)

    def delete_queryset(self, request, queryset):
        self._run(request, queryset, PurchaseOrderService.delete, "deleted")

    @display(description=_("Supplier"))
    def supplier_link(self, obj):
        url = reverse('admin:inventory_supplier_change', args=[obj.supplier_id])
        return format_html('<a href="{}">{}</a>', url, obj.supplier.name)

    @display(description=_("Status"), label=True)
    def status_badge(self, obj):
        return STATUS_COLORS.get(obj.status, 'info'), obj.get_status_display()

    def _run(self, request, queryset, operation, label):
        done = 0
        for po in queryset:
            try:
                operation(po.id)
                done += 1
            except ServiceError as e:
                self.message_user(request, f"{po.order_number}: {e.message}", messages.WARNING)
        if done:
            self.message_user(request, f"{done} order(s) {label}", messages.SUCCESS)

    @action(description=_("Submit for approval"))
    def submit_orders(self, request, queryset):
        self._run(request, queryset, PurchaseOrderService.submit, "submitted")

    @action(description=_("Mark as sent to supplier"))
    def send_orders(self, request, queryset):
        self._run(request, queryset, PurchaseOrderService.send, "sent")

    @action(description=_("Close"))
    def close_orders(self, request, queryset):
        self._run(request, queryset, PurchaseOrderService.close, "closed")


@admin.register(InventoryStock)
class InventoryStockAdmin(ModelAdmin):
    list_display = ['item', 'location', 'lot_number', 'serial_number',
                    'quantity_on_hand', 'quantity_available', 'unit_cost', 'expiration_date']
    list_filter = ['location', ('expiration_date', RangeDateFilter)]
    search_fields = ['item__sku', 'item__name', 'lot_number', 'serial_number']
    list_filter_submit = True
    readonly_fields = ['item', 'location', 'lot_number', 'serial_number',
                       'quantity_on_hand', 'quantity_reserved', 'quantity_available',
                       'unit_cost', 'received_date']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(ModelAdmin):
    list_display = ['transaction_number', 'transaction_type', 'item', 'location',
                    'quantity', 'unit_cost', 'reference_number', 'transaction_date']
    list_filter = [
        'transaction_type',
        'reference_type',
        ('transaction_date', RangeDateTimeFilter),
    ]
    search_fields = ['transaction_number', 'reference_number', 'item__sku', 'item__name', 'lot_number']
    list_filter_submit = True
    list_fullwidth = True

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(ModelAdmin):
    list_display = ['name', 'current_value', 'updated_at']
    readonly_fields = ['name', 'current_value', 'updated_at']

    def has_add_permission(self, request):
        return False


@admin.register(InventorySettings)
class InventorySettingsAdmin(ModelAdmin):
    list_display = ['__str__', 'costing_method', 'default_receiving_location']

    def has_add_permission(self, request):
        return not InventorySettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
