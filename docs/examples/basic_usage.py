from rfx_protocols import RFXProtocols

# Load the decoder table
protocols = RFXProtocols()

# List the packet types with a decoder
for packet_type in protocols.get_decoder_list():
    print(f"{packet_type.name} (0x{packet_type:02X})")
