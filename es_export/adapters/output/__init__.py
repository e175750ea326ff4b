from .csv import CSVRowSink, TSVRowSink, create_row_sink, open_csv_sink

__all__ = ['CSVRowSink', 'TSVRowSink', 'create_row_sink', 'open_csv_sink']
