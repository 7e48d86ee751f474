"""Main entry point for the Survey Fleet service.

Run FastAPI server:
    uvicorn survey_fleet.main:app --reload

Run Streamlit dashboard:
    streamlit run survey_fleet/streamlit_app.py

Seed demo data:
    python -m survey_fleet.persistence.seed
"""
if __name__ == '__main__':
    import uvicorn
    uvicorn.run("survey_fleet.main:app", host="0.0.0.0", port=8000, reload=True)
