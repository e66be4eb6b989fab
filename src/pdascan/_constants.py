"""Vendor constants and candidate tables shared across the library.

The vendor scanner service does not reliably document which broadcast
action and which extra key carry the decoded barcode, so the relay
listens for every known action and probes every known key.  Vendor
documented names come first; the rest are names used by other common
PDA scanner services.
"""

# ------------------------------------------------------------------
# Vendor reader service (CipherLab barcode base API)
# ------------------------------------------------------------------

READER_SERVICE_PACKAGE = "com.cipherlab.clbarcodeservice"

KEY_DECODER_DATA = "Decoder_Data"
KEY_DECODER_DATA_ARRAY = "Decoder_DataArray"
KEY_DECODER_CODE_TYPE = "Decoder_CodeType"
KEY_DECODER_CODE_TYPE_STR = "Decoder_CodeType_String"
KEY_DECODER_ERROR = "Decoder_Error"

ACTION_SERVICE_CONNECTED = "com.cipherlab.barcodebaseapi.SERVICE_CONNECTED"
ACTION_SOFTTRIGGER_DATA = "com.cipherlab.barcodebaseapi.SOFTTRIGGER_DATA"
ACTION_PASS_TO_APP = "com.cipherlab.barcodebaseapi.PASS_DATA_2_APP"
ACTION_DECODE_ERROR = "com.cipherlab.barcodebaseapi.decode_error"

COMMON_SCANNER_ACTIONS: tuple[str, ...] = (
    # vendor
    ACTION_PASS_TO_APP,
    ACTION_SERVICE_CONNECTED,
    ACTION_SOFTTRIGGER_DATA,
    ACTION_DECODE_ERROR,
    "android.intent.action.MAIN",
    # other scanner services
    "com.symbol.datawedge.api.ACTION",
    "com.honeywell.decode.intent.action.BARCODE_DATA",
    "com.datalogic.decode.action.BARCODE_DATA",
    "device.common.SCANNER_STATE",
    "android.intent.action.DECODE_DATA",
    "scan.rcv.message",
    "com.android.server.scannerservice.broadcast",
    "com.google.zxing.client.android.SCAN",
    # speculative
    "scanner.action.DECODE_DATA",
    "scanner.action.BARCODE_DATA",
    "barcode.data",
    "barcode.result",
    "com.barcode.sendResult",
    "com.scanner.broadcast",
)

COMMON_DATA_KEYS: tuple[str, ...] = (
    # vendor
    KEY_DECODER_DATA,
    KEY_DECODER_DATA_ARRAY,
    KEY_DECODER_CODE_TYPE,
    KEY_DECODER_CODE_TYPE_STR,
    KEY_DECODER_ERROR,
    # common
    "data",
    "barcode",
    "barcodeData",
    "barcode_string",
    "SCAN_RESULT",
    "RESULT",
    "decode_data",
    "barcode_value",
    "data_string",
    "scanData",
    "barocode",  # sic, seen on some firmware
    "barcode_data",
    "BARCODE",
    "DECODED_DATA",
    "decode_result",
    "scan_result",
)

# ------------------------------------------------------------------
# Host channels
# ------------------------------------------------------------------

SCAN_CHANNEL = "com.cympotek.grokscanner/scan_channel"
DEBUG_CHANNEL = "com.cympotek.grokscanner/debug_channel"

METHOD_GET_DEBUG_INFO = "getDebugInfo"
METHOD_LIST_INTENTS = "listAvailableIntents"
METHOD_LIST_KNOWN_TAGS = "listKnownTags"
METHOD_SIMULATE_SCAN = "simulateScan"
HOST_DEBUG_INFO_UPDATED = "debugInfoUpdated"
HOST_DIRECT_DATA_RECEIVED = "directDataReceived"

ERROR_SCAN = "SCAN_ERROR"
ERROR_INTENT = "INTENT_ERROR"

NO_DATA_MESSAGE = "No barcode data found in any known key"
SELF_TEST_PAYLOAD = "TEST_BARCODE_123"
SIMULATED_PAYLOAD_PREFIX = "TEST_BARCODE_"
