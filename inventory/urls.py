from django.urls import path

from inventory import views

app_name = "inventory"

urlpatterns = [
    # Settings
    path("settings/", views.InventorySettingsView.as_view(), name="settings"),

    # Suppliers
    path("suppliers/", views.SupplierListView.as_view(), name="supplier-list"),
    path("suppliers/<int:supplier_id>/", views.SupplierDetailView.as_view(), name="supplier-detail"),

    # Locations
    path("locations/", views.LocationListView.as_view(), name="location-list"),
    path("locations/<int:location_id>/", views.LocationDetailView.as_view(), name="location-detail"),

    # Items
    path("items/", views.ItemListView.as_view(), name="item-list"),
    path("items/<int:item_id>/", views.ItemDetailView.as_view(), name="item-detail"),

    # Stock ledger
    path("stock/", views.StockListView.as_view(), name="stock-list"),
    path("transactions/", views.TransactionListView.as_view(), name="transaction-list"),

    # Purchase orders
    path("purchase-orders/", views.PurchaseOrderListView.as_view(), name="po-list"),
    path("purchase-orders/stats/", views.PurchaseOrderStatsView.as_view(), name="po-stats"),
    path("purchase-orders/<int:po_id>/", views.PurchaseOrderDetailView.as_view(), name="po-detail"),
    path("purchase-orders/<int:po_id>/receive/", views.PurchaseOrderReceiveView.as_view(), name="po-receive"),
    path("purchase-orders/<int:po_id>/<str:action>/", views.PurchaseOrderActionView.as_view(), name="po-action"),
]
