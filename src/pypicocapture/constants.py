'''
Constant values from the ps4000Api.h header file that can be used to define
the properties of a PicoScope 4000 Series oscilloscope or for passing as
parameters to the driver functions.
'''

# ETS mode properties
PS4000_MAX_ETS_CYCLES = 400
PS4000_MAX_ETS_INTERLEAVE = 80

# ADC count properties
PS4262_MAX_VALUE = 32767
PS4262_MIN_VALUE = -32767

PS4000_MAX_VALUE = 32764
PS4000_MIN_VALUE = -32764

# External trigger input ADC count
PS4000_EXT_MAX_VALUE = 32767
PS4000_EXT_MIN_VALUE = -32767

MAX_PULSE_WIDTH_QUALIFIER_COUNT = 16777215
MAX_DELAY_COUNT = 8388607

# Function/arbitrary waveform parameters
AWG_BUFFER_8KS = 8192
MIN_SIG_GEN_FREQ = 0.0
MAX_SIG_GEN_FREQ = 100000.0
MAX_SIG_GEN_FREQ_4262 = 20000.0
MIN_SIG_GEN_BUFFER_SIZE = 1
MAX_SIG_GEN_BUFFER_SIZE = AWG_BUFFER_8KS
MIN_DWELL_COUNT = 10
PS4262_SIGGEN_MAXPKTOPK = 2000000
PS4000_SIGGEN_MAXPKTOPK = 4000000
PS4262_MAX_WAVEFORM_BUFFER_SIZE = 4096
PS4262_MIN_DWELL_COUNT = 3
MAX_SWEEPS_SHOTS = 2 ** 30 - 1

# Maximum/minimum waveform frequencies (Hz)
PS4000_SINE_MAX_FREQUENCY = 20000000
PS4000_SQUARE_MAX_FREQUENCY = 20000000
PS4000_TRIANGLE_MAX_FREQUENCY = 20000000
PS4000_SINC_MAX_FREQUENCY = 20000000
PS4000_RAMP_MAX_FREQUENCY = 20000000
PS4000_HALF_SINE_MAX_FREQUENCY = 20000000
PS4000_GAUSSIAN_MAX_FREQUENCY = 20000000
PS4000_PRBS_MAX_FREQUENCY = 1000000
PS4000_PRBS_MIN_FREQUENCY = 0.03
PS4000_MIN_FREQUENCY = 0.03

DUAL_SCOPE = 2
QUAD_SCOPE = 4

# Models handled by the ps4000 driver
PS4000_MODELS = ('4223', '4224', '4423', '4424', '4226', '4227', '4262')

PS4000_CHANNEL = {
    'PS4000_CHANNEL_A': 0,
    'PS4000_CHANNEL_B': 1,
    'PS4000_CHANNEL_C': 2,
    'PS4000_CHANNEL_D': 3,
    'PS4000_EXTERNAL': 4,
}

PS4000_RANGE = {
    'PS4000_10MV': 0,
    'PS4000_20MV': 1,
    'PS4000_50MV': 2,
    'PS4000_100MV': 3,
    'PS4000_200MV': 4,
    'PS4000_500MV': 5,
    'PS4000_1V': 6,
    'PS4000_2V': 7,
    'PS4000_5V': 8,
    'PS4000_10V': 9,
    'PS4000_20V': 10,
    'PS4000_50V': 11,
    'PS4000_100V': 12,
}

# Full scale of each range in mV, indexed by the PS4000_RANGE value
SCOPE_INPUT_RANGES = [10, 20, 50, 100, 200, 500, 1000, 2000, 5000, 10000, 20000, 50000, 100000, 200000]

PS4000_COUPLING = {
    'PS4000_AC': 0,
    'PS4000_DC': 1,
}

PS4000_THRESHOLD_DIRECTION = {
    'PS4000_ABOVE': 0,
    'PS4000_BELOW': 1,
    'PS4000_RISING': 2,
    'PS4000_FALLING': 3,
    'PS4000_RISING_OR_FALLING': 4,
}

PS4000_RATIO_MODE = {
    'PS4000_RATIO_MODE_NONE': 0,
    'PS4000_RATIO_MODE_AGGREGATE': 1,
}

PS4000_TIME_UNITS = {
    'PS4000_FS': 0,
    'PS4000_PS': 1,
    'PS4000_NS': 2,
    'PS4000_US': 3,
    'PS4000_MS': 4,
    'PS4000_S': 5,
}

TIME_UNIT_LABELS = ['fs', 'ps', 'ns', 'us', 'ms', 's']

# GetUnitInfo lines answered by the ps4000 driver, values from picosdk.constants.PICO_INFO
PS4000_INFO_LINES = (
    'PICO_DRIVER_VERSION',
    'PICO_USB_VERSION',
    'PICO_HARDWARE_VERSION',
    'PICO_VARIANT_INFO',
    'PICO_BATCH_AND_SERIAL',
    'PICO_CAL_DATE',
    'PICO_KERNEL_VERSION',
)


def channel_letter(channel):
    return channel[-1]


def max_adc_value(variant):
    '''
    Maximum ADC count for the model: the 4262 is a 16 bit scope, the others
    return values in +-32764.
    '''
    if variant is not None and variant.startswith('4262'):
        return PS4262_MAX_VALUE
    return PS4000_MAX_VALUE


def channel_count(variant):
    '''
    Number of analogue inputs, read from the second digit of the model
    number (4224 -> 2, 4424 -> 4).
    '''
    if not variant or len(variant) < 2 or not variant[1].isdigit():
        return DUAL_SCOPE
    if variant.startswith('4262'):
        return DUAL_SCOPE
    count = int(variant[1])
    return QUAD_SCOPE if count >= QUAD_SCOPE else DUAL_SCOPE
