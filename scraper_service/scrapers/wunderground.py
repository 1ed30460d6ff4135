"""Wunderground weather pages."""

from typing import Dict

from ..models import ClickStep, ScrapeConfig, TypeStep, WaitForNavigationStep, WaitForSelectorStep

wunderground_home_config = ScrapeConfig(
    url="https://www.wunderground.com/",
    wait_for_selector='[data-testid="CurrentConditions"]',
    wait_for_timeout=3000,
    navigation_timeout=60000,
    selectors={
        # Current conditions
        "currentTemp": '[data-testid="TemperatureValue"]',
        "condition": '[data-testid="wxPhrase"]',
        "feelsLike": '[data-testid="FeelsLikeSection"] [data-testid="TemperatureValue"]',
        "windSpeed": '[data-testid="Wind"] [data-testid="WindSpeed"]',
        "windDirection": '[data-testid="Wind"] [data-testid="WindDirection"]',
        "humidity": '[data-testid="PercentageValue"]',
        "dewPoint": '[data-testid="DewPoint"] [data-testid="TemperatureValue"]',
        "pressure": '[data-testid="PressureValue"]',
        "visibility": '[data-testid="VisibilitySection"] span',
        "uvIndex": '[data-testid="UVIndexValue"]',
        "location": '[data-testid="PresentationName"]',
        # Forecast cards
        "forecastDays": '[data-testid="DailyForecast"] [data-testid="DaypartDetails"]',
        "forecastTemps": '[data-testid="DailyForecast"] [data-testid="TemperatureValue"]',
        "hourlyForecast": '[data-testid="HourlyForecast"] [data-testid="HourlyForecastCard"]',
        "airQuality": '[data-testid="AirQualityModule"] [data-testid="AirQualityIndex"]',
    },
    post_process={
        "currentTemp": "unit_from_class",
        "feelsLike": "unit_from_class",
        "windSpeed": "unit_from_class",
        "pressure": "unit_from_class",
    },
)

# Search by ZIP code through the site's autocomplete box
wunderground_zip_config = ScrapeConfig(
    url="https://www.wunderground.com/",
    interactions=[
        WaitForSelectorStep(selector="#wuSearch"),
        TypeStep(selector="#wuSearch", param_name="zip"),
        WaitForSelectorStep(selector="search-autocomplete li a"),
        ClickStep(selector="search-autocomplete li a"),
        WaitForNavigationStep(),
    ],
    wait_for_timeout=3000,
    selectors={
        "location": "lib-city-header h1",
        "currentTemp": "lib-city-current-conditions .current-temp .wu-value",
        "condition": "lib-city-current-conditions .condition-icon p",
    },
    post_process={"currentTemp": "unit_from_class"},
)

wunderground_configs: Dict[str, ScrapeConfig] = {
    "wunderground-home": wunderground_home_config,
    "wunderground-zip": wunderground_zip_config,
}
