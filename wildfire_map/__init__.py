"""
California wildfire map
=======================

- Data loading (fires JSON, us-atlas boundary) is in `wildfire_map/loader.py`.
- Filtering and projection of the visible set is in `wildfire_map/engine.py`.
- Keyed reconciliation of on-screen circles is in `wildfire_map/reconciler.py`.
- The controller that owns the application state is in `wildfire_map/controller.py`.
- The Streamlit page is `app.py` at the repository root:

    streamlit run app.py
"""

__version__ = "1.0.0"
