from django.urls import path
from . import views

urlpatterns = [
    path('theme/', views.theme_detail, name='theme-detail'),
    path('theme/presets/', views.preset_list, name='theme-presets'),
    path('theme/stylesheet.css', views.theme_stylesheet, name='theme-stylesheet'),
]
