from django.urls import path
from . import views

app_name = 'bookings'

urlpatterns = [
    path('<int:pk>/confirm/', views.BookingConfirmView.as_view(), name='confirm'),
    path('<int:pk>/cancel/', views.BookingCancelView.as_view(), name='cancel'),
    path('reservations/', views.ReservationCreateView.as_view(), name='reservation_create'),
    path('reservations/<int:pk>/cancel/', views.ReservationCancelView.as_view(), name='reservation_cancel'),
]
