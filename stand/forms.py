from django import forms


class NicknameForm(forms.Form):
    """
    Login / rename form. Uniqueness is checked against the users table
    by the view.
    """
    nickname = forms.CharField(max_length=40)

    def clean_nickname(self):
        nickname = self.cleaned_data["nickname"].strip()
        if not nickname:
            raise forms.ValidationError("Nickname cannot be empty.")
        return nickname


class IngredientListField(forms.CharField):
    """Comma separated ingredient names -> ordered list without duplicates."""

    def to_python(self, value):
        raw = super().to_python(value)
        ingredients = []
        for entry in raw.split(","):
            entry = entry.strip()
            if entry and entry not in ingredients:
                ingredients.append(entry)
        return ingredients

    def validate(self, value):
        if not value:
            raise forms.ValidationError("Ingredients cannot be empty.")


class RecipeForm(forms.Form):
    """
    Form used for creating or editing a recipe.
    """
    name = forms.CharField(max_length=100)
    ingredients = IngredientListField(
        max_length=1000,
        help_text="Format: bun, meat, cheese"
    )

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Recipe name cannot be empty.")
        return name


class IngredientForm(forms.Form):
    ingredient = forms.CharField(max_length=60)

    def clean_ingredient(self):
        ingredient = self.cleaned_data["ingredient"].strip()
        if not ingredient:
            raise forms.ValidationError("Ingredient cannot be empty.")
        return ingredient


class PricesForm(forms.Form):
    burger_price = forms.DecimalField(min_value=0, max_digits=8, decimal_places=2)
    fries_price = forms.DecimalField(min_value=0, max_digits=8, decimal_places=2)


class OrderCounterForm(forms.Form):
    current_number = forms.IntegerField(min_value=0)


class PriorityForm(forms.Form):
    delta = forms.TypedChoiceField(choices=[("1", "+1"), ("-1", "-1")], coerce=int)


class CommentForm(forms.Form):
    text = forms.CharField(max_length=500, widget=forms.Textarea(attrs={"rows": 2}))

    def clean_text(self):
        text = self.cleaned_data["text"].strip()
        if not text:
            raise forms.ValidationError("Comment cannot be empty.")
        return text


class ItemSelectionForm(forms.Form):
    """
    Selected item ids of an order (or of the draft order).
    """
    OPERATIONS = ("paid", "delivered", "complete", "delete")

    operation = forms.ChoiceField(choices=[(op, op) for op in OPERATIONS])
    selected = forms.MultipleChoiceField(choices=[], required=False)

    def __init__(self, *args, items=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["selected"].choices = [(i["item_id"], i["item_id"]) for i in items]

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("operation") != "complete" and not cleaned.get("selected"):
            raise forms.ValidationError("Select at least one item first.")
        return cleaned


class DraftForm(forms.Form):
    """Buttons of the order creation screen."""
    ACTIONS = ("add_burger", "add_fries", "remove_selected", "priority_up", "priority_down", "submit", "discard")

    action = forms.ChoiceField(choices=[(a, a) for a in ACTIONS])
    include_fries = forms.BooleanField(required=False)
    selected = forms.MultipleChoiceField(choices=[], required=False)
    comment = forms.CharField(max_length=500, required=False, widget=forms.Textarea(attrs={"rows": 2}))

    def __init__(self, *args, items=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["selected"].choices = [(i["item_id"], i["item_id"]) for i in items]


class NameForm(forms.Form):
    """Album / expense action name."""
    name = forms.CharField(max_length=100)

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Name cannot be empty.")
        return name


class PhotoUploadForm(forms.Form):
    # stored on S3 after compression
    image = forms.ImageField()


class ExpenseItemForm(forms.Form):
    description = forms.CharField(max_length=200)
    amount = forms.DecimalField(max_digits=10, decimal_places=2)
    photo_id = forms.ChoiceField(choices=[], required=False, label="Receipt photo")

    def __init__(self, *args, photos=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["photo_id"].choices = [("", "-- none --")] + [
            (p["photo_id"], p["file_name"]) for p in photos
        ]

    def clean_description(self):
        description = self.cleaned_data["description"].strip()
        if not description:
            raise forms.ValidationError("Description cannot be empty.")
        return description

    def clean_amount(self):
        amount = self.cleaned_data["amount"]
        if amount <= 0:
            raise forms.ValidationError("Amount must be greater than zero.")
        return amount
