"""
ML forecasting layer — regressor capability, training, rolling forecast.

Modules
-------
errors      : ForecastError hierarchy (InsufficientHistory, InvalidWindow,
              UntrainedModel).
regressor   : Regressor protocol, TrainedModel, build_regressor() factory.
mlp_model   : FeedForwardRegressor (scikit-learn MLP, default).
lgbm_model  : LightGBMRegressor.
ridge_model : RidgeRegressor.
trainer     : require_sufficient_history(), train_forecast_model().
forecaster  : forecast() — autoregressive multi-step projection.
predictor   : run_symbol_forecast() — history in, ForecastResult out.
"""
