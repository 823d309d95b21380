import gspread
from google.oauth2.service_account import Credentials

from .. import config

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]


def _credentials():
    return Credentials.from_service_account_file(config.CREDENTIALS_PATH, scopes=SCOPES)


def get_gspread_client():
    credentials = _credentials()
    return gspread.authorize(credentials)
