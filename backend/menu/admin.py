from django.contrib import admin

from .models import Category, MenuItem, ModifierOption, ModifierSet


class ModifierOptionInline(admin.TabularInline):
    model = ModifierOption
    extra = 1


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "order", "is_active")


@admin.register(ModifierSet)
class ModifierSetAdmin(admin.ModelAdmin):
    list_display = ("name", "internal_name", "selection_type", "min_selections", "max_selections")
    inlines = [ModifierOptionInline]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "is_available")
    list_filter = ("category", "is_available")
    filter_horizontal = ("modifier_sets",)
    search_fields = ("name",)
