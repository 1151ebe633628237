"""Reading and controlling an Alfen charging station over Modbus TCP."""