from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
	Favorite,
	PGFeedback,
	Profile,
	Property,
	PropertyImage,
	RoommateMessage,
	RoommateReview,
	SavedSearch,
	StudentDetail,
	User,
)


class ProfileInline(admin.StackedInline):
	model = Profile
	can_delete = False
	fields = ('full_name', 'email', 'phone', 'location', 'bio')


@admin.register(User)
class CustomUserAdmin(BaseUserAdmin):
	inlines = (ProfileInline,)
	list_display = ('username', 'email', 'is_staff')


class PropertyImageInline(admin.TabularInline):
	model = PropertyImage
	extra = 0


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
	list_display = ('title', 'owner', 'listing_type', 'property_type', 'price', 'status')
	list_filter = ('listing_type', 'property_type', 'status')
	search_fields = ('title', 'location', 'owner__username', 'owner__email')
	inlines = (PropertyImageInline,)


@admin.register(StudentDetail)
class StudentDetailAdmin(admin.ModelAdmin):
	list_display = ('user', 'property', 'college_name', 'move_in_date', 'has_booked_pg')
	list_filter = ('has_booked_pg',)
	search_fields = ('user__username', 'college_name', 'property__title')


@admin.register(RoommateMessage)
class RoommateMessageAdmin(admin.ModelAdmin):
	list_display = ('sender', 'recipient', 'property', 'read', 'created_at')
	list_filter = ('read',)


admin.site.register(Favorite)
admin.site.register(SavedSearch)
admin.site.register(PGFeedback)
admin.site.register(RoommateReview)
