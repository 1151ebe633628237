"""Current weather and hourly forecast for the home location."""