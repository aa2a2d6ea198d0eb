# Investment Tracker backend
