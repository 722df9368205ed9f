from django.urls import path
from . import views

app_name = 'rewards'

urlpatterns = [
    path('points/', views.PointsOverviewView.as_view(), name='points'),
    path('transactions/', views.TransactionListView.as_view(), name='transactions'),
    path('expiring/', views.ExpiringPointsView.as_view(), name='expiring'),
    path('redeem/', views.RedeemPointsView.as_view(), name='redeem'),
    path('transfer/', views.TransferPointsView.as_view(), name='transfer'),

    # Staff
    path('reconcile/', views.ReconcileView.as_view(), name='reconcile'),
]
