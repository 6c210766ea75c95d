from functools import wraps

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect

from .models import Property


def listing_owner_required(view_func):
    """Only let the owner of the listing named by the ``pk`` URL kwarg through."""

    @wraps(view_func)
    @login_required(login_url='login')
    def _wrapped_view(request, *args, **kwargs):
        listing = get_object_or_404(Property, pk=kwargs.get('pk'))
        if listing.owner_id != request.user.pk:
            messages.error(request, "You can only manage your own listings.")
            return redirect('profile')
        request.listing = listing
        return view_func(request, *args, **kwargs)

    return _wrapped_view


def resident_required(view_func):
    """Only let students booked into the listing named by ``pk`` through."""

    @wraps(view_func)
    @login_required(login_url='login')
    def _wrapped_view(request, *args, **kwargs):
        listing = get_object_or_404(Property, pk=kwargs.get('pk'))
        if not listing.student_details.filter(user=request.user).exists():
            messages.error(request, "Book a slot in this PG to chat with its residents.")
            return redirect('booking_slot', pk=listing.pk)
        request.listing = listing
        return view_func(request, *args, **kwargs)

    return _wrapped_view
