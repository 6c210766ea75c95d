from django import forms

from ..models import Property
from ..services.images import validate_image_upload

AMENITY_CHOICES = [
    ("wifi", "WiFi"),
    ("ac", "Air Conditioning"),
    ("meals", "Meals Included"),
    ("laundry", "Laundry"),
    ("security", "24/7 Security"),
    ("parking", "Parking"),
    ("gym", "Gym"),
    ("power_backup", "Power Backup"),
    ("furnished", "Furnished"),
]


class PropertyForm(forms.ModelForm):
    amenities = forms.MultipleChoiceField(
        choices=AMENITY_CHOICES,
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    property_image = forms.ImageField(required=False)

    class Meta:
        model = Property
        fields = [
            "title",
            "description",
            "location",
            "price",
            "property_type",
            "listing_type",
            "bedrooms",
            "bathrooms",
            "area_sqft",
            "owner_name",
            "owner_phone",
            "owner_email",
            "owner_address",
            "owner_description",
        ]
        widgets = {
            "title": forms.TextInput(attrs={"class": "form-control", "placeholder": "e.g., 2BHK near campus"}),
            "description": forms.Textarea(attrs={"class": "form-control", "rows": 4}),
            "location": forms.TextInput(attrs={"class": "form-control", "placeholder": "e.g., Koramangala, Bangalore"}),
            "price": forms.NumberInput(attrs={"class": "form-control", "min": 0, "step": "0.01"}),
            "property_type": forms.Select(attrs={"class": "form-select"}),
            "listing_type": forms.Select(attrs={"class": "form-select"}),
            "bedrooms": forms.NumberInput(attrs={"class": "form-control", "min": 0}),
            "bathrooms": forms.NumberInput(attrs={"class": "form-control", "min": 0}),
            "area_sqft": forms.NumberInput(attrs={"class": "form-control", "min": 0}),
            "owner_name": forms.TextInput(attrs={"class": "form-control"}),
            "owner_phone": forms.TextInput(attrs={"class": "form-control"}),
            "owner_email": forms.EmailInput(attrs={"class": "form-control"}),
            "owner_address": forms.Textarea(attrs={"class": "form-control", "rows": 2}),
            "owner_description": forms.Textarea(attrs={"class": "form-control", "rows": 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["property_image"].widget.attrs.update({"class": "form-control", "accept": "image/*"})
        if self.instance and self.instance.pk and isinstance(self.instance.amenities, dict):
            self.initial["amenities"] = self.instance.amenities_list

    def clean_price(self):
        price = self.cleaned_data.get("price")
        if price is not None and price <= 0:
            raise forms.ValidationError("Price must be greater than zero.")
        return price

    def clean_property_image(self):
        image = self.cleaned_data.get("property_image")
        if image:
            validate_image_upload(image)
        return image

    def clean(self):
        cleaned_data = super().clean()
        listing_type = cleaned_data.get("listing_type")
        property_type = cleaned_data.get("property_type")
        if listing_type == "pg" and property_type and property_type != "pg":
            self.add_error("property_type", "PG listings must use the PG property type.")
        return cleaned_data

    def save(self, commit=True):
        """Map the checked amenities onto the full flag dict. Owner and photo are set by PropertyService."""
        listing = super().save(commit=False)
        selected = set(self.cleaned_data.get("amenities") or [])
        listing.amenities = {key: key in selected for key, _ in AMENITY_CHOICES}

        if commit:
            listing.save()
        return listing


class PropertyStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Property.STATUS_CHOICES)


class SavedSearchForm(forms.Form):
    name = forms.CharField(max_length=255, widget=forms.TextInput(attrs={"class": "form-control"}))
