"""
Event Export Backend Entry Point

Run with: uvicorn event_export.main:app --reload --port 8000
Or: python main.py
"""

from event_export.main import app

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("event_export.main:app", host="0.0.0.0", port=8000, reload=True)
