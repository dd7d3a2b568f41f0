import os
import sqlite3


class Database:

    @staticmethod
    def connect(path):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return sqlite3.connect(path)
